from django.urls import path

from .api.views import payment_views

app_name = "payment_system"

urlpatterns = [
    # Checkout
    path("checkout/", payment_views.checkout, name="checkout"),
    # Payment proof verification
    path("orders/<uuid:order_id>/payment-proof/", payment_views.submit_payment_proof, name="submit_payment_proof"),
    path(
        "orders/<uuid:order_id>/payment-proof/approve/",
        payment_views.approve_payment_proof,
        name="approve_payment_proof",
    ),
    path(
        "orders/<uuid:order_id>/payment-proof/reject/",
        payment_views.reject_payment_proof,
        name="reject_payment_proof",
    ),
    # Distribution
    path("orders/<uuid:order_id>/distribute/", payment_views.distribute_order_payment, name="distribute_order"),
    path("shops/<uuid:shop_id>/earnings/", payment_views.seller_earnings, name="seller_earnings"),
]
