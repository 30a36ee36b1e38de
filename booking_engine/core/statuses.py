"""Reservation and payment status vocabularies."""
from typing import Optional

PENDIENTE = "pendiente"
CONFIRMADA = "confirmada"
PAGADA = "pagada"
CANCELADA = "cancelada"
FINALIZADA = "finalizada"

# Only these statuses block a court
ACTIVE_STATUSES = (PENDIENTE, CONFIRMADA, PAGADA)
RESERVATION_STATUSES = ACTIVE_STATUSES + (CANCELADA, FINALIZADA)

PAYMENT_STATUSES = ("pendiente_pago", "senado", "pagado", "cancelado")

PAYMENT_STATUS_ALIASES = {
    "pendiente": "pendiente_pago",
    "pendiente de pago": "pendiente_pago",
    "pendiente_pago": "pendiente_pago",
    "sin_abonar": "pendiente_pago",
    "sin abonar": "pendiente_pago",
    "sin_pagar": "pendiente_pago",
    "senado": "senado",
    "senia": "senado",
    "seña": "senado",
    "senia_parcial": "senado",
    "senia_total": "senado",
    "seña_parcial": "senado",
    "seña_total": "senado",
    "pagado": "pagado",
    "pagada": "pagado",
    "pagada_parcial": "pagado",
    "pagada_total": "pagado",
    "pago": "pagado",
    "pago_parcial": "pagado",
    "abonada": "pagado",
    "abonado": "pagado",
    "abonada_parcial": "pagado",
    "abonado_parcial": "pagado",
    "abonada_total": "pagado",
    "abono": "pagado",
    "cancelado": "cancelado",
    "cancelada": "cancelado",
    "rechazado": "cancelado",
}

# Allowed changes of the reservation status; terminal states have none
TRANSITIONS = {
    PENDIENTE: {CONFIRMADA, PAGADA, CANCELADA, FINALIZADA},
    CONFIRMADA: {PAGADA, CANCELADA, FINALIZADA},
    PAGADA: {CANCELADA, FINALIZADA},
    CANCELADA: set(),
    FINALIZADA: set(),
}

TIPO_RELACIONADA = "relacionada"
TIPO_PRIVADA = "privada"
RESERVATION_KINDS = (TIPO_RELACIONADA, TIPO_PRIVADA)


def is_active(estado: str) -> bool:
    return estado in ACTIVE_STATUSES


def normalize_status(estado) -> Optional[str]:
    """Return the canonical reservation status or None if it is not recognised."""
    if not isinstance(estado, str):
        return None
    normalized = estado.strip().lower()
    return normalized if normalized in RESERVATION_STATUSES else None


def normalize_payment_status(estado_pago) -> Optional[str]:
    """Return the canonical payment status for ``estado_pago`` or None."""
    if estado_pago is None:
        return None
    normalized = str(estado_pago).strip().lower()
    if not normalized:
        return None
    return PAYMENT_STATUS_ALIASES.get(normalized)
