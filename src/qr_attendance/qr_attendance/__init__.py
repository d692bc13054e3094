"""QR classroom attendance package.

Organized by feature modules (users, courses, sessions, attendance) with a thin
Flask controller layer over service/repository layers.
"""
