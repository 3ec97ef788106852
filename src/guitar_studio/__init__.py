"""Guitar Studio portal package.

This package is organized by feature modules (users, classes, enrollments,
attendance, requests, ...) with a thin Flask controller layer on top of
service and repository layers backed by MongoDB.
"""
