"""
Storefront Assistant
Configuration Module
"""
from .settings import MonitoringSettings, Settings, StoreSettings, get_settings

__all__ = ["MonitoringSettings", "Settings", "StoreSettings", "get_settings"]
