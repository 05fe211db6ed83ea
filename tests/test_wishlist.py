import asyncio

from storefront import ErrorKind, Storefront

from tests.conftest import BUYER, MUG, NOTEBOOK, eventually


class TestToggle:
    async def test_toggle_twice_restores_membership(self, signed_in: Storefront, backend):
        wishlist = signed_in.wishlist

        first = (await wishlist.toggle(MUG)).unwrap()
        assert first.is_added
        assert wishlist.contains("p1")
        assert signed_in.channel.last("wishlist").text == "Added to wishlist!"

        second = (await wishlist.toggle(MUG)).unwrap()
        assert not second.is_added
        assert not wishlist.contains("p1")
        assert backend.wishlist == []
        assert signed_in.channel.last("wishlist").text == "Removed from wishlist"

    async def test_second_toggle_while_in_flight_is_rejected(self, signed_in: Storefront, backend):
        release = backend.hold("POST", "/api/wishlist/toggle")
        first = asyncio.create_task(signed_in.wishlist.toggle(MUG))
        await eventually(lambda: "p1" in backend.wishlist)

        second = await signed_in.wishlist.toggle(NOTEBOOK)
        assert second.unwrap_err().kind is ErrorKind.BUSY
        assert signed_in.wishlist.busy

        release.set()
        assert (await first).unwrap().is_added
        assert len(backend.calls_to("POST", "/api/wishlist/toggle")) == 1
        assert signed_in.wishlist.count() == 1

    async def test_rate_limit_has_its_own_text(self, signed_in: Storefront, backend):
        backend.fail("POST", "/api/wishlist/toggle", 429)

        result = await signed_in.wishlist.toggle(MUG)

        assert result.unwrap_err().kind is ErrorKind.RATE_LIMITED
        assert signed_in.channel.last("wishlist").text == "Too many requests. Please wait a moment."
        assert not signed_in.wishlist.contains("p1")

    async def test_server_failure_uses_generic_text(self, signed_in: Storefront, backend):
        backend.fail("POST", "/api/wishlist/toggle", 500)

        await signed_in.wishlist.toggle(MUG)

        assert signed_in.channel.last("wishlist").text == "Failed to update wishlist"
        assert not signed_in.wishlist.busy

    async def test_signed_out_toggle_redirects(self, shop: Storefront, backend):
        result = await shop.wishlist.toggle(MUG, path="/products/p1")

        assert result.unwrap_err().kind is ErrorKind.AUTH_REQUIRED
        assert backend.calls == []
        assert shop.navigator.current_path == "/login"
        assert shop.channel.last("auth").text == "Please login to manage wishlist"


class TestSetOperations:
    async def test_add_is_noop_when_present(self, signed_in: Storefront, backend):
        await signed_in.wishlist.add(MUG)
        await signed_in.wishlist.add(MUG)

        assert signed_in.wishlist.count() == 1
        assert len(backend.calls_to("POST", "/api/wishlist/toggle")) == 1

    async def test_remove_absent_is_noop(self, signed_in: Storefront, backend):
        before = len(backend.calls)
        assert (await signed_in.wishlist.remove("p1")).unwrap() == ()
        assert len(backend.calls) == before

    async def test_remove_present(self, signed_in: Storefront, backend):
        await signed_in.wishlist.add(MUG)
        await signed_in.wishlist.remove("p1")
        assert backend.wishlist == []

    async def test_signed_out_remove_is_noop(self, shop: Storefront, backend):
        assert (await shop.wishlist.remove("p1")).unwrap() == ()
        assert shop.navigator.visits == []

    async def test_clear(self, signed_in: Storefront, backend):
        await signed_in.wishlist.add(MUG)
        await signed_in.wishlist.clear()

        assert signed_in.wishlist.items == ()
        assert backend.wishlist == []
        assert signed_in.channel.last("wishlist").text == "Wishlist cleared"


class TestSync:
    async def test_login_pulls_server_wishlist(self, shop: Storefront, backend):
        backend.wishlist.extend(["p2", "p3"])

        await shop.login(BUYER)

        assert shop.wishlist.count() == 2
        assert shop.wishlist.contains("p3")
        notebook = shop.wishlist.items[0]
        assert notebook.name == "Notebook"
        assert notebook.thumbnail == "https://cdn.example.com/p2.jpg"

    async def test_logout_clears_locally(self, signed_in: Storefront, backend):
        await signed_in.wishlist.add(MUG)
        signed_in.logout()

        assert signed_in.wishlist.items == ()
        assert backend.wishlist == ["p1"]
