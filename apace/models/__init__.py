from .user_model import User
from .admin_model import Admin
from .driver_document_model import DriverDocument, DocumentStatus, DOCUMENT_FIELDS
from .driver_model import Driver, AvailabilityStatus
from .vehicle_model import Vehicle, VehicleStatus
from .vehicle_type_model import VehicleType, ICON_KEYS, normalize_vehicle_type
from .shipment_model import Shipment, ShipmentStatus, PaymentStatus, BookingUserType, TERMINAL_STATUSES
from .notification_model import (
    Notification,
    NotificationType,
    NotificationStatus,
    NotificationPriority,
    DeviceToken,
    DevicePlatform,
)
from .otp_model import OtpVerification
from .address_model import Address
from .preferences_model import UserPreferences, Language

__all__ = [
    "User",
    "Admin",
    "Driver",
    "AvailabilityStatus",
    "DriverDocument",
    "DocumentStatus",
    "DOCUMENT_FIELDS",
    "Vehicle",
    "VehicleStatus",
    "VehicleType",
    "ICON_KEYS",
    "normalize_vehicle_type",
    "Shipment",
    "ShipmentStatus",
    "PaymentStatus",
    "BookingUserType",
    "TERMINAL_STATUSES",
    "Notification",
    "NotificationType",
    "NotificationStatus",
    "NotificationPriority",
    "DeviceToken",
    "DevicePlatform",
    "OtpVerification",
    "Address",
    "UserPreferences",
    "Language",
]
