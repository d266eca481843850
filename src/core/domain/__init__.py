"""Modelos y scalars del dominio.

Por qué:
- Aquí viven los formatos de cable y las estructuras de respuesta (Pydantic v2).
- El dominio no conoce HTTP ni contenedores: solo el contrato del ledger.
"""
