"""Class attendance package.

Organized by feature modules (sessions, attendance, roster, users) with a thin
Flask controller layer over service and repository layers.
"""
