import datetime
from decimal import Decimal

import factory

from finance.records import Area, ApplicationType, Client, Expense, ServiceRecord


class AreaFactory(factory.Factory):
    class Meta:
        model = Area

    id = factory.Sequence(lambda n: f"a{n}")
    name = factory.Sequence(lambda n: f"Fazenda {n}")
    hectares = Decimal("50")


class ClientFactory(factory.Factory):
    class Meta:
        model = Client

    id = factory.Sequence(lambda n: f"c{n}")
    name = factory.Sequence(lambda n: f"Cliente {n}")
    contact = "(64) 99999-0000"
    areas = factory.LazyFunction(lambda: (AreaFactory(),))
    is_partner = False
    partner_name = None


class PartnerClientFactory(ClientFactory):
    is_partner = True
    partner_name = "Kaká"


class ServiceRecordFactory(factory.Factory):
    class Meta:
        model = ServiceRecord

    id = factory.Sequence(lambda n: f"s{n}")
    date = datetime.date(2024, 3, 10)
    client_id = "c-outside"
    client_name = "Cliente avulso"
    area_id = "a-outside"
    area_name = "Talhão 1"
    hectares = Decimal("10")
    type = ApplicationType.SPRAYING
    unit_price = Decimal("150")
    total_value = factory.LazyAttribute(lambda o: o.hectares * o.unit_price)
    closed = False


class ExpenseFactory(factory.Factory):
    class Meta:
        model = Expense

    id = factory.Sequence(lambda n: f"e{n}")
    date = datetime.date(2024, 3, 12)
    description = "Combustível"
    amount = Decimal("500")
    category = "Operacional"
    closed = False
