# src/config/env.py
import os

# Environment constants to avoid typos in comparisons
ENV_DEV = "dev"
ENV_PROD = "prod"

# Simple env flag: "dev" shortens the simulated AI wait, defaulting to "prod"
APP_ENV = os.getenv("APP_ENV", ENV_PROD).lower()
