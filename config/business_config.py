"""
Business configuration - replaceable salon defaults

A new deployment can implement its own configuration and replace the
default one (catalog seed, default staff, void reasons).
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any


class BusinessConfig(ABC):
    """Business configuration abstract base class"""

    @abstractmethod
    def get_service_types(self) -> List[Dict[str, Any]]:
        """Default service catalog seeded into an empty database"""
        pass

    @abstractmethod
    def get_seed_staff(self) -> List[Dict[str, Any]]:
        """Default staff seeded into an empty database"""
        pass

    @abstractmethod
    def get_void_reasons(self) -> List[str]:
        """Reasons offered when voiding a transaction"""
        pass


class SalonConfig(BusinessConfig):
    """Hair, nail and lash salon configuration"""

    def get_service_types(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Women's Haircut", "category": "HAIR", "price": 50.0, "duration_min": 60},
            {"name": "Men's Haircut", "category": "HAIR", "price": 30.0, "duration_min": 45},
            {"name": "Hair Coloring", "category": "HAIR", "price": 120.0, "duration_min": 120},
            {"name": "Gel Manicure", "category": "NAIL", "price": 40.0, "duration_min": 60},
            {"name": "Pedicure", "category": "NAIL", "price": 45.0, "duration_min": 60},
            {"name": "Classic Lash Extensions", "category": "LASH", "price": 80.0, "duration_min": 90},
            {"name": "Lash Lift", "category": "LASH", "price": 60.0, "duration_min": 60},
            {"name": "Shampoo Bottle", "category": "PRODUCT", "price": 25.0, "duration_min": 0},
        ]

    def get_seed_staff(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Alice (Stylist)", "role": "STYLIST", "pin": "1111"},
            {"name": "Bob (Assistant)", "role": "ASSISTANT", "pin": "2222"},
            {"name": "Charlie (Manager)", "role": "ADMIN", "pin": "3333"},
        ]

    def get_void_reasons(self) -> List[str]:
        return [
            "Wrong service",
            "Wrong staff",
            "Duplicate transaction",
            "Payment mistake",
            "Other",
        ]


# Global business configuration (can be replaced in app.py)
business_config: BusinessConfig = SalonConfig()
