# src/config/version.py

APP_NAME = "Mine-for-AI"
APP_VERSION = "0.3.0"
