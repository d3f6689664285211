"""Fixed in-memory registry for tests and local demos."""

from __future__ import annotations

from collections.abc import Mapping

from protodiff.core.errors import RegistryError
from protodiff.engines.drift_scanner.models import SchemaDescriptor

DEFAULT_FIXTURES: dict[str, SchemaDescriptor] = {
    "buf.build/example/greeter": SchemaDescriptor.build(
        {"greeter.Greeter": ["SayHello", "SayHelloAgain"]},
        ["greeter.HelloRequest", "greeter.HelloReply"],
    ),
    "buf.build/example/user": SchemaDescriptor.build(
        {"user.UserService": ["GetUser", "CreateUser", "ListUsers"]},
        [
            "user.GetUserRequest",
            "user.UserResponse",
            "user.CreateUserRequest",
            "user.ListUsersRequest",
            "user.ListUsersResponse",
        ],
    ),
    "buf.build/acme/user": SchemaDescriptor.build(
        {
            "user.v1.UserService": [
                "GetUser",
                "CreateUser",
                "UpdateUser",
                "DeleteUser",
                "ListUsers",
            ]
        },
        [
            "user.v1.User",
            "user.v1.GetUserRequest",
            "user.v1.GetUserResponse",
            "user.v1.CreateUserRequest",
            "user.v1.CreateUserResponse",
        ],
    ),
    "buf.build/acme/order": SchemaDescriptor.build(
        {"order.v1.OrderService": ["CreateOrder", "GetOrder", "ListOrders", "CancelOrder"]},
        [
            "order.v1.Order",
            "order.v1.CreateOrderRequest",
            "order.v1.GetOrderRequest",
            "order.v1.ListOrdersRequest",
        ],
    ),
    "buf.build/acme/payment": SchemaDescriptor.build(
        {"payment.v1.PaymentService": ["ProcessPayment", "RefundPayment", "GetPaymentStatus"]},
        [
            "payment.v1.Payment",
            "payment.v1.ProcessPaymentRequest",
            "payment.v1.RefundPaymentRequest",
        ],
    ),
}


class FixtureRegistrySource:
    """Serves schemas from a dict; unknown modules raise :class:`RegistryError`."""

    def __init__(self, schemas: Mapping[str, SchemaDescriptor] | None = None) -> None:
        self._schemas = dict(DEFAULT_FIXTURES if schemas is None else schemas)

    def add_schema(self, module: str, schema: SchemaDescriptor) -> None:
        self._schemas[module] = schema

    async def fetch_schema(self, ref: str) -> SchemaDescriptor:
        schema = self._schemas.get(ref)
        if schema is None:
            raise RegistryError(f"schema not found for module: {ref}")
        return schema
