"""Configuration for the appointment booking client.

All settings centralized here - override through environment variables or a .env file.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# API Configuration
API_BASE_URL = os.getenv(
    "MEDIBOOK_API_URL",
    "https://appointment-manager-node.onrender.com/api/v1"
).rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("MEDIBOOK_REQUEST_TIMEOUT", "15"))

# Local persistent storage (stands in for browser localStorage)
STORAGE_URL = os.getenv("MEDIBOOK_STORAGE_URL", "sqlite:///medibook_storage.db")

LOG_LEVEL = os.getenv("MEDIBOOK_LOG_LEVEL", "INFO")

# Doctor directory always requests the first page
DOCTOR_PAGE_SIZE = 20

# Registration choices: (value, label)
SPECIALIZATIONS = [
    ("cardiology", "Cardiology"),
    ("dermatology", "Dermatology"),
    ("endocrinology", "Endocrinology"),
    ("gastroenterology", "Gastroenterology"),
    ("general-practice", "General Practice"),
    ("neurology", "Neurology"),
    ("oncology", "Oncology"),
    ("orthopedics", "Orthopedics"),
    ("pediatrics", "Pediatrics"),
    ("psychiatry", "Psychiatry"),
    ("radiology", "Radiology"),
    ("surgery", "Surgery"),
    ("other", "Other"),
]

# Bookable slots: morning and afternoon shifts, 30 minutes each
TIME_SLOTS = [
    "09:00 AM",
    "09:30 AM",
    "10:00 AM",
    "10:30 AM",
    "11:00 AM",
    "11:30 AM",
    "02:00 PM",
    "02:30 PM",
    "03:00 PM",
    "03:30 PM",
    "04:00 PM",
    "04:30 PM",
]

# The two appointment views spell the completed status differently on the wire
PATIENT_COMPLETED_STATUS = "COMPLETE"
DOCTOR_COMPLETED_STATUS = "COMPLETED"

# Mock backend
MOCK_API_HOST = os.getenv("MOCK_API_HOST", "127.0.0.1")
MOCK_API_PORT = int(os.getenv("MOCK_API_PORT", "5000"))
