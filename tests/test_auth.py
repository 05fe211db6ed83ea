from kungfu import Ok

from storefront import ErrorKind, Settings
from storefront.auth import AuthGate, Buyer, MemoryNavigator, MemorySlot, Session
from storefront.messages import Channel


def make_gate(start: str = "/", buyer: Buyer | None = None) -> tuple[AuthGate, MemoryNavigator, Channel]:
    navigator = MemoryNavigator(start=start)
    channel = Channel()
    gate = AuthGate(Session(buyer), MemorySlot(), navigator, channel, Settings())
    return gate, navigator, channel


class TestAuthGate:
    def test_signed_in_passes_without_side_effects(self):
        gate, navigator, channel = make_gate(buyer=Buyer("u1"))
        assert gate.require("/products/1") == Ok(None)
        assert navigator.visits == []
        assert channel.history == ()

    def test_signed_out_redirects_and_remembers_path(self):
        gate, navigator, channel = make_gate()

        result = gate.require("/products/1", "Please login to add items to cart")

        assert result.unwrap_err().kind is ErrorKind.AUTH_REQUIRED
        assert navigator.current_path == "/login"
        assert channel.last("auth").text == "Please login to add items to cart"
        assert gate.resume() == "/products/1"

    def test_defaults_to_current_path(self):
        gate, _, _ = make_gate(start="/wishlist")
        gate.require()
        assert gate.resume() == "/wishlist"

    def test_resume_is_read_once(self):
        gate, _, _ = make_gate()
        gate.require("/cart")
        assert gate.resume() == "/cart"
        assert gate.resume() == "/"
        assert gate.resume("/account") == "/account"

    def test_last_write_wins(self):
        gate, _, _ = make_gate()
        gate.require("/products/1")
        gate.require("/products/2")
        assert gate.resume() == "/products/2"


class TestSession:
    def test_listeners_see_login_and_logout(self):
        session = Session()
        seen: list[Buyer | None] = []
        session.on_change(seen.append)

        buyer = Buyer("u1", "Asha")
        session.login(buyer)
        session.logout()
        session.logout()

        assert seen == [buyer, None]
        assert not session.authenticated
