"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos de Paperless (Pydantic v2), los inputs
  tipados de las operaciones y la jerarquía de errores.
- El dominio no conoce HTTP, MCP, ni CLI: solo conceptos del archivo documental.
"""
