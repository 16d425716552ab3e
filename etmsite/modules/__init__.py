"""
etmsite Modules
===============

- auth: administrator credentials and bearer tokens
- records: projects, partners and certificates
- uploads: image uploads
- api: the /api blueprint tying them together
"""
