"""Mock API for the appointment booking client.

Flask server with in-memory storage implementing the endpoints the client
consumes:
- Authentication (register, login)
- Doctor directory and specializations
- Appointment booking, listing and status changes

The mock owns the business rules the client leaves to the backend: only
PENDING appointments change status, and a doctor cannot be double-booked.

Run with: python mock_api.py
"""
import math
import uuid
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

import bcrypt
from flask import Flask, request, jsonify, g
from flask_cors import CORS

from medibook import config
from medibook.logging_config import RequestIDMiddleware, get_logger, setup_structured_logging

API_PREFIX = "/api/v1"
DOCTOR_APPOINTMENTS_PAGE_SIZE = 10
BCRYPT_ROUNDS = 4  # Mock only: keep hashing fast

logger = get_logger(__name__)

app = Flask(__name__)
CORS(app)
app.wsgi_app = RequestIDMiddleware(app.wsgi_app)

# In-memory storage
users = {}
tokens = {}
appointments = []

SEED_DOCTORS = [
    {"name": "Dr. Alice Moreno", "email": "alice@clinic.test", "specialization": "Cardiology",
     "experience": "12 years", "rating": 4.8},
    {"name": "Dr. Bob Chen", "email": "bob@clinic.test", "specialization": "Neurology",
     "experience": "8 years", "rating": 4.6},
    {"name": "Dr. Carla Singh", "email": "carla@clinic.test", "specialization": "Pediatrics",
     "experience": "15 years", "rating": 4.9},
    {"name": "Dr. David Osei", "email": "david@clinic.test", "specialization": "Dermatology",
     "experience": "5 years", "rating": 4.4},
]
SEED_PASSWORD = "Password1"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def create_user(name, email, password, role, specialization=None, photo_url=None,
                age=None, phone=None, **extra):
    user_id = uuid.uuid4().hex[:24]
    users[user_id] = {
        "id": user_id,
        "name": name,
        "email": email.lower(),
        "password_hash": hash_password(password),
        "role": role,
        "specialization": specialization,
        "photo_url": photo_url,
        "age": age,
        "phone": phone,
        **extra,
    }
    return users[user_id]


def reset_state(seed: bool = True):
    """Drop all data; optionally reload the demo doctors."""
    users.clear()
    tokens.clear()
    appointments.clear()
    if seed:
        for doctor in SEED_DOCTORS:
            create_user(password=SEED_PASSWORD, role="DOCTOR", **doctor)


def public_user(user: dict) -> dict:
    return {"id": user["id"], "name": user["name"], "email": user["email"],
            "role": user["role"].lower()}


def public_doctor(user: dict) -> dict:
    return {
        "id": user["id"],
        "name": user["name"],
        "specialization": user.get("specialization") or "",
        "photo_url": user.get("photo_url"),
        "rating": user.get("rating"),
        "experience": user.get("experience"),
    }


def parse_status(value: Optional[str]) -> Optional[str]:
    """Accept both spellings of the completed status."""
    if not value:
        return None
    value = value.strip().upper()
    if value == "COMPLETE":
        return "COMPLETED"
    if value in ("PENDING", "COMPLETED", "CANCELLED"):
        return value
    return None


def parse_instant(value: str) -> Optional[datetime]:
    try:
        instant = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def require_auth(role: Optional[str] = None):
    """Resolve the bearer token to a user; optionally restrict by role."""
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            token = header[7:] if header.startswith("Bearer ") else None
            user = users.get(tokens.get(token)) if token else None
            if user is None:
                return error("Not authorized, token missing or invalid", 401)
            if role and user["role"] != role:
                return error("Forbidden for this role", 403)
            g.user = user
            return view(*args, **kwargs)
        return wrapper
    return decorator


@app.route(f'{API_PREFIX}/auth/register', methods=['POST'])
def register():
    """POST /auth/register - Create a patient or doctor account."""
    data = request.get_json(silent=True) or {}
    for field in ("name", "email", "password", "role"):
        if not data.get(field):
            return error(f"Missing required field: {field}", 400)

    role = str(data["role"]).upper()
    if role not in ("PATIENT", "DOCTOR"):
        return error("Role must be PATIENT or DOCTOR", 400)
    if role == "DOCTOR" and not data.get("specialization"):
        return error("Specialization is required for doctors", 400)

    email = data["email"].lower()
    if any(u["email"] == email for u in users.values()):
        return error("Email already exists", 409)

    specialization = data.get("specialization")
    if specialization:
        specialization = specialization.replace("-", " ").title()

    user = create_user(
        name=data["name"],
        email=email,
        password=data["password"],
        role=role,
        specialization=specialization,
        photo_url=data.get("photo_url"),
    )
    logger.info("user_registered", user_id=user["id"], role=role)
    return jsonify({"success": True, "data": {"user": public_user(user)}}), 201


@app.route(f'{API_PREFIX}/auth/login', methods=['POST'])
def login():
    """POST /auth/login - Exchange credentials for a bearer token."""
    data = request.get_json(silent=True) or {}
    email = str(data.get("email", "")).lower()
    role = str(data.get("role", "")).upper()

    user = next(
        (u for u in users.values() if u["email"] == email and u["role"] == role),
        None
    )
    if user is None or not verify_password(str(data.get("password", "")), user["password_hash"]):
        return error("Invalid email or password", 401)

    token = uuid.uuid4().hex
    tokens[token] = user["id"]
    logger.info("user_logged_in", user_id=user["id"], role=role)
    return jsonify({"success": True, "data": {"user": public_user(user), "token": token}})


@app.route(f'{API_PREFIX}/doctors', methods=['GET'])
def list_doctors():
    """GET /doctors?page=1&limit=20"""
    page = max(1, request.args.get("page", 1, type=int) or 1)
    limit = max(1, request.args.get("limit", 20, type=int) or 20)
    doctors = [public_doctor(u) for u in users.values() if u["role"] == "DOCTOR"]
    start = (page - 1) * limit
    return jsonify({
        "success": True,
        "data": doctors[start:start + limit],
        "total": len(doctors),
        "totalPages": max(1, math.ceil(len(doctors) / limit)),
    })


@app.route(f'{API_PREFIX}/specializations', methods=['GET'])
def list_specializations():
    """GET /specializations - Distinct specializations of registered doctors."""
    specializations = sorted({
        u["specialization"] for u in users.values()
        if u["role"] == "DOCTOR" and u.get("specialization")
    })
    return jsonify({"success": True, "data": specializations})


@app.route(f'{API_PREFIX}/appointments', methods=['POST'])
@require_auth("PATIENT")
def create_appointment():
    """POST /appointments - Book an appointment.

    Expected JSON body:
    {
        "doctorId": "...",
        "date": "2026-11-02T14:30:00.000Z",
        "reason": "Recurring chest pain"
    }
    """
    data = request.get_json(silent=True) or {}
    for field in ("doctorId", "date", "reason"):
        if not data.get(field):
            return error(f"Missing required field: {field}", 400)

    doctor = users.get(data["doctorId"])
    if doctor is None or doctor["role"] != "DOCTOR":
        return error("Doctor not found", 404)

    instant = parse_instant(data["date"])
    if instant is None:
        return error("Invalid date format. Use an ISO-8601 instant", 400)
    if instant.date() < datetime.now(timezone.utc).date():
        return error("Appointment date must be today or in the future", 400)

    slot_taken = any(
        apt["doctor_id"] == doctor["id"]
        and apt["date"] == instant
        and apt["status"] != "CANCELLED"
        for apt in appointments
    )
    if slot_taken:
        return error("This time slot is no longer available", 409)

    appointment = {
        "id": uuid.uuid4().hex[:24],
        "doctor_id": doctor["id"],
        "patient_id": g.user["id"],
        "date": instant,
        "reason": data["reason"].strip(),
        "status": "PENDING",
        "created_at": datetime.now(timezone.utc),
    }
    appointments.append(appointment)
    logger.info("appointment_created", appointment_id=appointment["id"], doctor_id=doctor["id"])
    return jsonify({"success": True, "data": patient_row(appointment)}), 201


def _iso(instant: datetime) -> str:
    return instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def patient_row(apt: dict) -> dict:
    doctor = users.get(apt["doctor_id"], {})
    return {
        "_id": apt["id"],
        "doctor": {
            "name": doctor.get("name"),
            "specialization": doctor.get("specialization"),
            "photo_url": doctor.get("photo_url"),
        },
        "date": _iso(apt["date"]),
        "reason": apt["reason"],
        # Patient API uses the short spelling
        "status": "COMPLETE" if apt["status"] == "COMPLETED" else apt["status"],
        "createdAt": _iso(apt["created_at"]),
    }


def doctor_row(apt: dict) -> dict:
    patient = users.get(apt["patient_id"], {})
    return {
        "id": apt["id"],
        "patient": {
            "name": patient.get("name"),
            "age": patient.get("age"),
            "phone": patient.get("phone"),
        },
        "date": _iso(apt["date"]),
        "reason": apt["reason"],
        "status": apt["status"],
        "createdAt": _iso(apt["created_at"]),
    }


@app.route(f'{API_PREFIX}/appointments/patient', methods=['GET'])
@require_auth("PATIENT")
def list_patient_appointments():
    """GET /appointments/patient?status=PENDING"""
    status = request.args.get("status")
    wanted = parse_status(status)
    if status and wanted is None:
        return error(f"Unknown status: {status}", 400)

    rows = [
        patient_row(apt) for apt in appointments
        if apt["patient_id"] == g.user["id"] and (wanted is None or apt["status"] == wanted)
    ]
    return jsonify({"success": True, "data": rows})


@app.route(f'{API_PREFIX}/appointments/<appointment_id>/cancel', methods=['PATCH'])
@require_auth("PATIENT")
def cancel_appointment(appointment_id):
    """PATCH /appointments/<id>/cancel"""
    apt = next((a for a in appointments if a["id"] == appointment_id), None)
    if apt is None or apt["patient_id"] != g.user["id"]:
        return error("Appointment not found", 404)
    if apt["status"] != "PENDING":
        return error("Only pending appointments can be cancelled", 400)

    apt["status"] = "CANCELLED"
    logger.info("appointment_cancelled", appointment_id=appointment_id)
    return jsonify({"success": True, "data": patient_row(apt)})


@app.route(f'{API_PREFIX}/appointments/doctor', methods=['GET'])
@require_auth("DOCTOR")
def list_doctor_appointments():
    """GET /appointments/doctor?status=PENDING&date=2026-11-02&page=1"""
    status = request.args.get("status")
    wanted = parse_status(status)
    if status and wanted is None:
        return error(f"Unknown status: {status}", 400)

    day = request.args.get("date")
    if day:
        try:
            day = datetime.strptime(day, "%Y-%m-%d").date()
        except ValueError:
            return error("Invalid date format. Use YYYY-MM-DD", 400)

    page = max(1, request.args.get("page", 1, type=int) or 1)
    matching = [
        apt for apt in sorted(appointments, key=lambda a: a["date"])
        if apt["doctor_id"] == g.user["id"]
        and (wanted is None or apt["status"] == wanted)
        and (not day or apt["date"].astimezone(timezone.utc).date() == day)
    ]
    total_pages = max(1, math.ceil(len(matching) / DOCTOR_APPOINTMENTS_PAGE_SIZE))
    start = (page - 1) * DOCTOR_APPOINTMENTS_PAGE_SIZE
    return jsonify({
        "success": True,
        "data": [doctor_row(a) for a in matching[start:start + DOCTOR_APPOINTMENTS_PAGE_SIZE]],
        "page": page,
        "totalPages": total_pages,
    })


@app.route(f'{API_PREFIX}/appointments/update-status', methods=['PATCH'])
@require_auth("DOCTOR")
def update_appointment_status():
    """PATCH /appointments/update-status - body {appointment_id, status}"""
    data = request.get_json(silent=True) or {}
    new_status = parse_status(data.get("status"))
    if new_status not in ("COMPLETED", "CANCELLED"):
        return error("Status must be COMPLETED or CANCELLED", 400)

    apt = next((a for a in appointments if a["id"] == data.get("appointment_id")), None)
    if apt is None or apt["doctor_id"] != g.user["id"]:
        return error("Appointment not found", 404)
    if apt["status"] != "PENDING":
        return error("Only pending appointments can be updated", 400)

    apt["status"] = new_status
    logger.info("appointment_status_updated", appointment_id=apt["id"], status=new_status)
    return jsonify({"success": True, "data": doctor_row(apt)})


@app.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"})


reset_state()


def main():
    """Run the mock API server."""
    setup_structured_logging(config.LOG_LEVEL)
    print(f"Mock API running on http://{config.MOCK_API_HOST}:{config.MOCK_API_PORT}{API_PREFIX}")
    print(f"Demo doctor login: {SEED_DOCTORS[0]['email']} / {SEED_PASSWORD}")
    app.run(host=config.MOCK_API_HOST, port=config.MOCK_API_PORT, debug=False)


if __name__ == '__main__':
    main()
