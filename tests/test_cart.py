import asyncio

import pytest

from storefront import LATEST_REQUEST, ErrorKind, ResourceState, Storefront, SyncPolicy
from storefront.cart import Cart, CartLineItem, ProductRef
from storefront.wire import CartLinePayload, ProductPayload

from tests.conftest import BUYER, LAMP, MUG, NOTEBOOK, eventually


class TestCartTypes:
    def test_quantity_must_be_positive(self):
        with pytest.raises(ValueError):
            CartLineItem(MUG, 0, 100)

    def test_one_line_per_product(self):
        cart = Cart.of([CartLineItem(MUG, 1, 100), CartLineItem(NOTEBOOK, 1, 250), CartLineItem(MUG, 3, 100)])
        assert len(cart.lines) == 2
        assert cart.line("p1").quantity == 3
        assert cart.total == 550
        assert cart.count == 4

    def test_unit_price_prefers_final_price(self):
        product = ProductPayload.model_validate({"_id": "p1", "name": "Mug", "price": 120, "finalPrice": 100})
        assert CartLineItem.from_wire(CartLinePayload(product=product, quantity=1)).unit_price == 100
        assert CartLineItem.from_wire(CartLinePayload(product=product, quantity=1, price=90)).unit_price == 90
        assert CartLineItem.from_wire(CartLinePayload(product=product, quantity=1, final_price=80)).unit_price == 80

    def test_bare_product_id_line(self):
        line = CartLineItem.from_wire(CartLinePayload(product="p9", quantity=2))
        assert line.product == ProductRef("p9")
        assert line.line_total == 0


class TestCartManager:
    async def test_total_tracks_server_after_any_sequence(self, signed_in: Storefront, backend):
        cart = signed_in.cart
        await cart.add(MUG, 2)
        await cart.add(NOTEBOOK)
        await cart.set_quantity("p1", 3)
        await cart.remove("p2")
        await cart.add(LAMP)

        assert cart.total() == 3 * 100 + 400
        assert cart.total() == backend.cart_total()
        assert cart.count() == 4
        assert cart.state is ResourceState.IDLE

    async def test_add_merges_quantity(self, signed_in: Storefront):
        await signed_in.cart.add(MUG)
        await signed_in.cart.add(MUG, 2)
        assert signed_in.cart.quantity_of("p1") == 3
        assert signed_in.channel.last("cart").text == "Added to cart successfully!"

    async def test_remove_absent_is_a_noop(self, signed_in: Storefront, backend):
        await signed_in.cart.add(MUG)
        before = len(backend.calls)

        result = await signed_in.cart.remove("p404")

        assert result.unwrap() == signed_in.cart.cart
        assert len(backend.calls) == before

    async def test_zero_quantity_removes(self, signed_in: Storefront, backend):
        await signed_in.cart.add(MUG)
        await signed_in.cart.set_quantity("p1", 0)

        assert not signed_in.cart.contains("p1")
        assert backend.calls_to("DELETE", "/api/cart/remove/p1")

    async def test_increment_and_decrement(self, signed_in: Storefront):
        cart = signed_in.cart
        await cart.add(MUG)
        await cart.increment("p1")
        assert cart.quantity_of("p1") == 2

        await cart.decrement("p1")
        await cart.decrement("p1")
        assert not cart.contains("p1")

    async def test_signed_out_add_sends_nothing(self, shop: Storefront, backend):
        result = await shop.cart.add(MUG, path="/products/p1")

        assert result.unwrap_err().kind is ErrorKind.AUTH_REQUIRED
        assert backend.calls == []
        assert shop.navigator.current_path == "/login"
        assert shop.gate.resume() == "/products/p1"

    async def test_failure_leaves_state_untouched(self, signed_in: Storefront, backend):
        await signed_in.cart.add(MUG)
        backend.fail("PUT", "/api/cart/update", 500)

        result = await signed_in.cart.set_quantity("p1", 5)

        assert result.unwrap_err().kind is ErrorKind.SERVER
        assert signed_in.cart.quantity_of("p1") == 1
        assert signed_in.cart.state is ResourceState.ERROR
        assert signed_in.channel.last("cart").text == "Failed to update quantity"

    async def test_not_found_keeps_server_message(self, signed_in: Storefront):
        await signed_in.cart.add(ProductRef("p404", "Ghost", 1))
        assert signed_in.channel.last("cart").text == "Product not found"

    async def test_listeners_see_every_replacement(self, signed_in: Storefront):
        seen: list[Cart] = []
        stop = signed_in.cart.subscribe(seen.append)

        await signed_in.cart.add(MUG)
        await signed_in.cart.clear()
        stop()
        await signed_in.cart.add(MUG)

        assert [c.count for c in seen] == [1, 0]
        assert signed_in.channel.last("cart").text == "Added to cart successfully!"

    async def test_clear(self, signed_in: Storefront, backend):
        await signed_in.cart.add(MUG)
        await signed_in.cart.clear()

        assert signed_in.cart.cart.empty
        assert backend.cart == {}
        assert signed_in.channel.last("cart").text == "Cart cleared"


class TestCartOrdering:
    async def _stale_update(self, shop: Storefront, backend) -> None:
        """Older PUT answers after a newer POST; its body lacks the notebook."""
        await shop.cart.add(MUG)
        release = backend.hold("PUT", "/api/cart/update")

        older = asyncio.create_task(shop.cart.set_quantity("p1", 3))
        await eventually(lambda: backend.cart.get("p1") == 3)
        await shop.cart.add(NOTEBOOK)

        release.set()
        await older

    async def test_default_applies_last_response(self, signed_in: Storefront, backend):
        await self._stale_update(signed_in, backend)

        assert not signed_in.cart.contains("p2")
        assert "p2" in backend.cart

    async def test_latest_request_drops_stale_response(self, settings, transport, backend):
        policy = SyncPolicy().with_ordering(LATEST_REQUEST)
        async with Storefront(settings, transport=transport, cart_policy=policy) as shop:
            await shop.login(BUYER)
            await self._stale_update(shop, backend)

            assert shop.cart.contains("p2")
            assert shop.cart.quantity_of("p1") == 3

    async def test_closed_manager_ignores_late_response(self, signed_in: Storefront, backend):
        release = backend.hold("POST", "/api/cart/add")
        pending = asyncio.create_task(signed_in.cart.add(MUG))
        await eventually(lambda: "p1" in backend.cart)

        signed_in.cart.close()
        release.set()
        await pending

        assert signed_in.cart.cart.empty
