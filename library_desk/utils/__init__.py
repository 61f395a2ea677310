"""Library Desk - Utilities Package

Helpers used by the command-line front-end:
- Input validators (ISBN checksum, text fields, e-mail)
- Output rendering in plain, JSON or Rich table form
"""
