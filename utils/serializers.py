def _iso(dt):
    return dt.isoformat() if dt else None


def barbershop_to_dict(shop, detailed=False):
    out = {
        "id": shop.id,
        "name": shop.name,
        "address": shop.address,
        "phone": shop.phone,
    }
    if detailed:
        out.update({
            "email": shop.email,
            "description": shop.description,
            "workingHours": shop.working_hours,
            "createdAt": _iso(shop.created_at),
        })
    return out


def service_to_dict(service):
    return {
        "id": service.id,
        "name": service.name,
        "description": service.description,
        "category": service.category,
        "price": service.price,
        "durationMin": service.duration_min,
        "barbershopId": service.barbershop_id,
    }


def barber_to_dict(barber, detailed=False):
    out = {
        "id": barber.id,
        "name": barber.display_name,
        "barbershopId": barber.barbershop_id,
        "userId": barber.user_id,
    }
    if detailed:
        out.update({
            "bio": barber.bio,
            "workingHours": barber.working_hours,
            "services": [service_to_dict(s) for s in barber.services if s.is_active],
        })
    return out


def slot_to_dict(slot):
    return {
        "id": slot.id,
        "barberId": slot.barber_id,
        "startTime": _iso(slot.start_time),
        "endTime": _iso(slot.end_time),
        "isBooked": slot.is_booked,
        "isBlocked": slot.is_blocked,
        "reason": slot.block_reason,
    }


def booking_to_dict(booking):
    slot = booking.slot
    user = booking.user
    return {
        "id": booking.id,
        "status": booking.status,
        "userId": booking.user_id,
        "client": {
            "id": user.id,
            "name": user.full_name,
            "email": user.email,
        } if user else None,
        "phone": booking.phone,
        "notes": booking.notes,
        "totalPrice": booking.total_price,
        "totalDuration": booking.total_duration,
        "barber": barber_to_dict(booking.barber),
        "barbershop": barbershop_to_dict(booking.barbershop),
        "slot": slot_to_dict(slot) if slot else None,
        "startTime": _iso(slot.start_time) if slot else None,
        "endTime": _iso(slot.end_time) if slot else None,
        "services": [
            {
                "serviceId": item.service_id,
                "name": item.service.name if item.service else None,
                "price": item.price,
                "duration": item.duration,
            }
            for item in booking.line_items
        ],
        "createdAt": _iso(booking.created_at),
        "cancelledAt": _iso(booking.cancelled_at),
        "cancelReason": booking.cancel_reason,
    }
