"""
Configuration Management
Loads and validates environment variables
"""
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration"""

    # Application Settings
    TIMEZONE = os.getenv("TIMEZONE", "America/Sao_Paulo")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Yield fallbacks (% of raw material) used when there is no production history
    YIELD_FALLBACK_SEBO = float(os.getenv("YIELD_FALLBACK_SEBO", 28.5))
    YIELD_FALLBACK_FCO = float(os.getenv("YIELD_FALLBACK_FCO", 26.39))
    YIELD_FALLBACK_FARINHETA = float(os.getenv("YIELD_FALLBACK_FARINHETA", 3.47))

    # Bag weights for load forecasts
    BAG_WEIGHT_SMALL_KG = float(os.getenv("BAG_WEIGHT_SMALL_KG", 1450))
    BAG_WEIGHT_LARGE_KG = float(os.getenv("BAG_WEIGHT_LARGE_KG", 1500))

    # Theoretical cadence: 1 bag every 15 minutes, 2 shifts of 8h
    BAGS_PER_HOUR = float(os.getenv("BAGS_PER_HOUR", 4))
    SHIFT_HOURS = float(os.getenv("SHIFT_HOURS", 16))

    # Target flow rate, also the assumed throughput for the fixed-rate hourly chart
    TARGET_FLOW_RATE_TON_PER_HOUR = float(os.getenv("TARGET_FLOW_RATE_TON_PER_HOUR", 7.125))

    @classmethod
    def validate(cls):
        """Validate numeric configuration"""
        positive = ['BAG_WEIGHT_SMALL_KG', 'BAG_WEIGHT_LARGE_KG']
        non_negative = [
            'YIELD_FALLBACK_SEBO', 'YIELD_FALLBACK_FCO', 'YIELD_FALLBACK_FARINHETA',
            'BAGS_PER_HOUR', 'SHIFT_HOURS', 'TARGET_FLOW_RATE_TON_PER_HOUR'
        ]

        invalid = [field for field in positive if getattr(cls, field) <= 0]
        invalid += [field for field in non_negative if getattr(cls, field) < 0]

        if invalid:
            raise ValueError(f"Invalid numeric configuration: {', '.join(invalid)}")

        return True

# Validate on import
Config.validate()
