import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    TRAIN_RATIO = float(os.getenv('TRAIN_RATIO', 0.8))
    PREVIEW_ROWS = int(os.getenv('PREVIEW_ROWS', 100))
    HOLIDAY_COUNTRY = os.getenv('HOLIDAY_COUNTRY') or None
    DEFAULT_SESSION_ID = os.getenv('DEFAULT_SESSION_ID', 'default')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    
    @classmethod
    def validate(cls):
        """Validate configured values"""
        if not 0 < cls.TRAIN_RATIO < 1:
            raise ValueError("TRAIN_RATIO must be between 0 and 1")
        if cls.PREVIEW_ROWS <= 0:
            raise ValueError("PREVIEW_ROWS must be positive")
