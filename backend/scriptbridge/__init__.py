"""
scriptbridge: export sandboxed Python script functions to the macro language.

Scripts declare functions with ExportedFunction; the host registers them,
resolves call arguments and marshals DataValues to native values and back.
"""
