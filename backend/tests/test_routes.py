from clubhub.modules.users.api import router


def _routes() -> set[tuple[str, str]]:
    return {(route.path, method) for route in router.routes for method in route.methods}


def test_follow_aliases_under_users_me():
    routes = _routes()
    assert ("/me/clubs/{club_id}/follow", "POST") in routes
    assert ("/me/clubs/{club_id}/follow", "DELETE") in routes
    assert ("/me/clubs/{club_id}/following", "GET") in routes
