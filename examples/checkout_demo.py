"""
Checkout Demo — cart → coupon → checkout session → online payment.

Runs against the in-process shop backend; the payment widget is scripted.

Run: uv run python -m examples.checkout_demo
"""

from kungfu import Error, Ok

from storefront import Buyer, Storefront
from storefront.cart import ProductRef
from storefront.payment import Completed, Dismissed, GatewayOptions, PaymentMethod, ScriptedGateway

from examples._infra import banner, local_backend, print_notices, run
from examples.shop_backend import sign

MUG = ProductRef("p1", "Ceramic Mug", 100)


def pay_ok(options: GatewayOptions) -> Completed:
    return Completed(options.order_id, "pay_demo_1", sign(options.order_id, "pay_demo_1"))


async def main() -> None:
    state, transport, settings = local_backend()
    gateway = ScriptedGateway([Dismissed(), pay_ok])

    async def load_gateway() -> ScriptedGateway:
        return gateway

    async with Storefront(settings, transport=transport, gateway=load_gateway) as shop:
        print_notices(shop.channel)

        banner("1. Signed out: add is gated")
        await shop.cart.add(MUG, 2, path="/products/p1")
        print(f"   Requests sent: {len(state.calls)}")

        banner("2. Login resumes where the buyer left")
        destination = await shop.login(Buyer("u1", "Asha Rao", "asha@example.com"))
        print(f"   Resumed at: {destination}")

        banner("3. Cart")
        await shop.cart.add(MUG, 2)
        print(f"   Items: {shop.cart.count()}, total: ₹{shop.cart.total():g}")

        banner("4. Checkout")
        calc = shop.checkout()
        calc.select_address("addr_1")
        await calc.apply_coupon("SAVE50")
        summary = calc.summary()
        print(
            f"   Subtotal ₹{summary.subtotal:g} + shipping ₹{summary.shipping:g}"
            f" - discount ₹{summary.discount:g} = ₹{summary.total:g}"
        )
        match await calc.proceed():
            case Ok(session):
                print(f"   Session total: ₹{session.total:g}")
            case Error(e):
                print(f"   Error: {e}")
                return

        banner("5. Payment (dismissed, then completed)")
        payment = shop.payment(session)
        for attempt in (1, 2):
            match await payment.pay(PaymentMethod.ONLINE):
                case Ok(receipt):
                    print(f"   Attempt {attempt}: {receipt.state.value} for {receipt.order_id}")
                case Error(e):
                    print(f"   Attempt {attempt}: {e}")

        print(f"   Orders created: {len(state.orders)}")
        print(f"   Now at: {shop.navigator.current_path}")
        print(f"   Cart after order: {shop.cart.count()} items")


if __name__ == "__main__":
    run(main)
