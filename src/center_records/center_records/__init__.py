"""Center Records package.

This package is organized by feature modules (students, sessions, records,
centers, uploads, reports) with a thin Flask controller layer and
service/repository layers underneath.
"""
