"""
Filer-facing modules built on the pure engines.

Modules own configuration, domain models and jurisdiction policy; all
tax arithmetic is delegated to ``salestax_engines``.
"""
