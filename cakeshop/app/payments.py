"""Manual mobile-money payment instructions shown after an order is placed."""
from ..data.models import Order
from ..schemas.order_models import PaymentInstructions
from .config import Config


def build_payment_instructions(order: Order) -> PaymentInstructions:
    amount = order.total_amount
    display_amount = int(amount) if float(amount).is_integer() else amount
    return PaymentInstructions(
        method=Config.PAYMENT_METHOD,
        phone_number=Config.PAYMENT_PHONE_NUMBER,
        amount=amount,
        currency=Config.CURRENCY,
        reference=order.order_number,
        instructions=[
            "Dial *115# on your Airtel phone",
            "Select option 5 (Send Money)",
            f"Enter recipient number: {Config.PAYMENT_PHONE_NUMBER}",
            f"Enter amount: {Config.CURRENCY} {display_amount}",
            f"Reference: {order.order_number}",
            "Follow prompts to complete payment",
            'Click "Payment Complete" once the transaction is done',
        ],
    )
