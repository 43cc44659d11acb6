# config.py
# -*- coding: utf-8 -*-
import os
from dotenv import load_dotenv
load_dotenv()
BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    FLASK_DEBUG = os.getenv("FLASK_DEBUG", "1")
    FLASK_APP = os.getenv("FLASK_APP", "cloudvault_app.wsgi")
    # Flask
    SECRET_KEY = os.getenv("SECRET_KEY", "cloudvault-dev")
    SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "cloudvault_session")

    # Durable storage (flat files, one line per record)
    USERS_FILE = os.getenv("USERS_FILE", os.path.join(BASE_DIR, "cloud_users.dat"))
    DATA_DIR = os.getenv("DATA_DIR", os.path.join(BASE_DIR, "cloud_data"))
    AUDIT_LOG_FILE = os.getenv("AUDIT_LOG_FILE", os.path.join(BASE_DIR, "cloud_system.log"))

    # Security policy
    MAX_FAILED_LOGINS = int(os.getenv("MAX_FAILED_LOGINS", "5"))
    PASSWORD_MIN_LEN = int(os.getenv("PASSWORD_MIN_LEN", "8"))
    BCRYPT_LOG_ROUNDS = int(os.getenv("BCRYPT_LOG_ROUNDS", "12"))

    # MFA delivery is simulated; "1" returns the code in the login response (demo only)
    MFA_ECHO_CODE = os.getenv("MFA_ECHO_CODE", "0") == "1"


class TestingConfig(Config):
    TESTING = True
    FLASK_ENV = "testing"
    FLASK_DEBUG = "0"
    BCRYPT_LOG_ROUNDS = 4
    MFA_ECHO_CODE = True
    USERS_FILE = os.getenv("USERS_FILE", os.path.join(BASE_DIR, "test_users.dat"))
    DATA_DIR = os.getenv("DATA_DIR", os.path.join(BASE_DIR, "test_data"))
    AUDIT_LOG_FILE = os.getenv("AUDIT_LOG_FILE", os.path.join(BASE_DIR, "test_system.log"))


class ProductionConfig(Config):
    FLASK_ENV = "production"
    FLASK_DEBUG = "0"
    MFA_ECHO_CODE = False
