import os

class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///fieldops.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    # rows a fresh month's expense sheet starts with
    DEFAULT_DIRECT_EXPENSE_TYPES = ['Mobile Bill', 'EB Bill', 'Petrol']
