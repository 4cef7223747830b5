"""Paratransit booking client for the PassInfoServer SOAP backend.

Typical use::

    from paratransit.service import BookingService
    from paratransit.transport.http import HttpTransport
    from paratransit.geocoding.nominatim import NominatimGeocoder

    service = BookingService(HttpTransport(), NominatimGeocoder())
    outcome = await service.book_trip(session_cookie, client_id, intent)
"""

__version__ = "0.1.0"
