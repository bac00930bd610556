import random
import uuid
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.utils import timezone
from faker import Faker

from marketplace.cart.domain.aggregate import CartLine
from marketplace.models import Order, OrderItem, Product, SellerStats, Shop
from payment_system.models import Payment, PaymentDistribution

User = get_user_model()
fake = Faker()  # Instantiate Faker once


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True


class SellerFactory(UserFactory):
    username = factory.Sequence(lambda n: f"seller_{n}")
    email = factory.Sequence(lambda n: f"seller_{n}@example.com")


class AdminFactory(UserFactory):
    is_superuser = True
    is_staff = True
    username = factory.Sequence(lambda n: f"admin_{n}")
    email = factory.Sequence(lambda n: f"admin_{n}@example.com")


class ShopFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Shop

    id = factory.LazyFunction(uuid.uuid4)
    owner = factory.SubFactory(SellerFactory)
    name = factory.Sequence(lambda n: f"Shop {n}")
    description = factory.Faker("sentence", nb_words=8)
    payout_account = factory.Sequence(lambda n: f"acct_{n}")
    is_active = True


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    id = factory.LazyFunction(uuid.uuid4)
    shop = factory.SubFactory(ShopFactory)
    name = factory.Sequence(lambda n: f"Product {n}")
    image_url = factory.Faker("image_url")
    price = factory.LazyFunction(lambda: Decimal(f"{random.randint(10, 500)}.00"))
    stock_quantity = factory.Faker("random_int", min=5, max=100)
    in_stock = True


class OnOrderProductFactory(ProductFactory):
    """Out-of-stock product sold on order, with per-unit fees."""

    stock_quantity = 0
    in_stock = False
    delivery_fee_local = Decimal("20.00")
    delivery_fee_uptown = Decimal("35.00")
    delivery_fee_outoftown = Decimal("60.00")
    delivery_fee_countrywide = Decimal("120.00")
    runner_fee = Decimal("10.00")
    transport_fee = Decimal("15.00")


class SellerStatsFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SellerStats

    shop = factory.SubFactory(ShopFactory)
    total_revenue = Decimal("0.00")
    total_orders_settled = 0


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    id = factory.LazyFunction(uuid.uuid4)
    buyer = factory.SubFactory(UserFactory)
    shop = factory.SubFactory(ShopFactory)
    status = "processing"
    payment_status = "paid"
    payment_method = "cash"
    total_amount = factory.LazyFunction(lambda: Decimal(f"{random.randint(50, 500)}.00"))
    payment_date = factory.LazyAttribute(lambda o: timezone.now() if o.payment_status == "paid" else None)
    delivery_address = factory.LazyFunction(lambda: fake.street_address())
    phone_number = factory.LazyFunction(lambda: fake.numerify("+264 81 ### ####"))
    delivery_location = "local"


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory, shop=factory.SelfAttribute("..order.shop"))
    quantity = factory.Faker("random_int", min=1, max=3)
    price = factory.LazyAttribute(lambda o: o.product.price)


class PaymentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Payment

    id = factory.LazyFunction(uuid.uuid4)
    order = factory.SubFactory(OrderFactory)
    shop = factory.LazyAttribute(lambda o: o.order.shop)
    buyer = factory.LazyAttribute(lambda o: o.order.buyer)
    total_amount = factory.LazyAttribute(lambda o: o.order.total_amount)
    platform_fee = factory.LazyAttribute(lambda o: (o.total_amount * Decimal("0.05")).quantize(Decimal("0.01")))
    seller_amount = factory.LazyAttribute(lambda o: o.total_amount - o.platform_fee)
    payment_method = "cash"
    payment_provider = "cash"
    status = "completed"


class PaymentDistributionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PaymentDistribution

    order = factory.SubFactory(OrderFactory, status="delivered")
    shop = factory.LazyAttribute(lambda o: o.order.shop)
    total_amount = factory.LazyAttribute(lambda o: o.order.total_amount)
    platform_fee = factory.LazyAttribute(lambda o: (o.total_amount * Decimal("0.05")).quantize(Decimal("0.01")))
    seller_amount = factory.LazyAttribute(lambda o: o.total_amount - o.platform_fee)
    transfer_reference = factory.Sequence(lambda n: f"sim_tr_{n}")


class CartLineFactory(factory.Factory):
    """Plain cart line snapshot, no database rows behind it."""

    class Meta:
        model = CartLine

    product_id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    name = factory.Sequence(lambda n: f"Product {n}")
    price = factory.LazyFunction(lambda: Decimal(f"{random.randint(10, 500)}.00"))
    shop_id = "shop-a"
    shop_name = "Shop A"
    quantity = 1
    in_stock = True


class OnOrderCartLineFactory(CartLineFactory):
    in_stock = False
    delivery_fee_local = Decimal("20.00")
    delivery_fee_uptown = Decimal("35.00")
    delivery_fee_outoftown = Decimal("60.00")
    delivery_fee_countrywide = Decimal("120.00")
    runner_fee = Decimal("10.00")
    transport_fee = Decimal("15.00")
