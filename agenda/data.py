# agenda/data.py

import os

GUEST_CLIENT_ID = "guest"

shop_settings = {
    "database_url": os.environ.get("AGENDA_DATABASE_URL", "sqlite:///./agenda.db"),
    "timezone": os.environ.get("AGENDA_TIMEZONE", "America/Argentina/Buenos_Aires"),
    "slot_minutes": int(os.environ.get("AGENDA_SLOT_MINUTES", "30")),
    # "strict" enforces the transition table, "permissive" allows any status change
    "transition_policy": os.environ.get("AGENDA_TRANSITION_POLICY", "strict"),
    "log_level": os.environ.get("AGENDA_LOG_LEVEL", "INFO"),
    # "log" or "whatsapp"
    "dispatcher": os.environ.get("AGENDA_DISPATCHER", "log"),
}

DEFAULT_HOURS = [
    {"day": "monday", "is_open": True, "open_time": "09:00", "close_time": "18:00"},
    {"day": "tuesday", "is_open": True, "open_time": "09:00", "close_time": "18:00"},
    {"day": "wednesday", "is_open": True, "open_time": "09:00", "close_time": "18:00"},
    {"day": "thursday", "is_open": True, "open_time": "09:00", "close_time": "18:00"},
    {"day": "friday", "is_open": True, "open_time": "09:00", "close_time": "18:00"},
    {"day": "saturday", "is_open": True, "open_time": "10:00", "close_time": "14:00"},
    {"day": "sunday", "is_open": False, "open_time": "09:00", "close_time": "18:00"},
]

DEFAULT_SERVICES = {
    "barbershop": [
        {"id": "1", "name": "Corte de cabello", "duration_minutes": 30, "price": 15},
        {"id": "2", "name": "Afeitado clásico", "duration_minutes": 20, "price": 10},
        {"id": "3", "name": "Corte + Barba", "duration_minutes": 45, "price": 22},
        {"id": "4", "name": "Diseño de barba", "duration_minutes": 25, "price": 12},
    ],
    "salon": [
        {"id": "1", "name": "Corte de dama", "duration_minutes": 45, "price": 25},
        {"id": "2", "name": "Tinte", "duration_minutes": 90, "price": 50},
        {"id": "3", "name": "Peinado", "duration_minutes": 30, "price": 20},
        {"id": "4", "name": "Tratamiento capilar", "duration_minutes": 60, "price": 35},
    ],
    "restaurant": [
        {"id": "1", "name": "Mesa 2 personas", "duration_minutes": 90, "price": 0},
        {"id": "2", "name": "Mesa 4 personas", "duration_minutes": 90, "price": 0},
        {"id": "3", "name": "Mesa 6 personas", "duration_minutes": 120, "price": 0},
        {"id": "4", "name": "Reserva privada", "duration_minutes": 180, "price": 50},
    ],
    "clinic": [
        {"id": "1", "name": "Consulta general", "duration_minutes": 30, "price": 40},
        {"id": "2", "name": "Consulta especializada", "duration_minutes": 45, "price": 60},
        {"id": "3", "name": "Revisión", "duration_minutes": 20, "price": 25},
        {"id": "4", "name": "Procedimiento menor", "duration_minutes": 60, "price": 80},
    ],
    "spa": [
        {"id": "1", "name": "Masaje relajante", "duration_minutes": 60, "price": 45},
        {"id": "2", "name": "Facial", "duration_minutes": 45, "price": 35},
        {"id": "3", "name": "Manicure", "duration_minutes": 30, "price": 20},
        {"id": "4", "name": "Pedicure", "duration_minutes": 45, "price": 25},
    ],
    "gym": [
        {"id": "1", "name": "Entrenamiento personal", "duration_minutes": 60, "price": 30},
        {"id": "2", "name": "Clase grupal", "duration_minutes": 45, "price": 10},
        {"id": "3", "name": "Evaluación física", "duration_minutes": 30, "price": 20},
        {"id": "4", "name": "Plan nutricional", "duration_minutes": 45, "price": 35},
    ],
    "other": [
        {"id": "1", "name": "Servicio 1", "duration_minutes": 30, "price": 20},
        {"id": "2", "name": "Servicio 2", "duration_minutes": 45, "price": 30},
    ],
}

DEFAULT_NOTIFICATIONS = {
    "whatsapp_reminder": True,
    "reminder_hours": 24,
    "confirmation_message": True,
    "custom_message": (
        "Hola {nombre}, te recordamos tu turno para {servicio} "
        "el día {fecha} a las {hora}. ¡Te esperamos!"
    ),
}
