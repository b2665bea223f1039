"""
Move Masters Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("job", views.job_view),
    path("job/ledger", views.ledger_view),
    path("job/payout", views.payout_view),
    path("job/advance", views.advance_view),
    path("job/signatures/origin", views.origin_signature_view),
    path("job/signatures/delivery", views.delivery_signature_view),
    path("job/payments", views.payment_view),
    path("job/payments/clear", views.payment_clear_view),
    path("job/custody/arrival", views.warehouse_arrival_view),
    path("job/custody/handshake", views.warehouse_handshake_view),
    path("job/outbound/schedule", views.outbound_schedule_view),
    path("job/outbound/dispatch", views.outbound_dispatch_view),
]
