"""Gallery CMS - FastAPI REST API layer.

Modules
-------
main
    FastAPI application factory, all route handlers, and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request validation.
"""
