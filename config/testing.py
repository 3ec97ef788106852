import os

from .config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"

MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/thaybien_test")

DEBUG = False
TESTING = True
