"""Interfaces/abstracciones del Core.

Por qué:
- `ResourceClient` es el contrato que implementa el ejecutor HTTP.
- Los servicios dependen del Protocol, y los tests lo sustituyen por un fake.
"""
