"""
Integracion one-way Notion -> PostgreSQL para los catalogos.

El sync se dispara desde el API (preview + apply seleccionado), no como job.
"""
