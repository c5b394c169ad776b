from crmhub.models.user import User


def test_admin_user_list_is_admin_only(login, make_user):
    assert login(make_user(role="manager")).get("/api/admin/users").status_code == 403
    response = login(make_user(role="admin")).get("/api/admin/users")
    assert response.status_code == 200
    assert all("hashed_password" not in user for user in response.json())


def test_everyone_can_list_users(login, make_user):
    make_user(role="admin")
    response = login(make_user()).get("/api/users")
    assert response.status_code == 200
    assert len(response.json()) == 2


def test_admin_updates_role_and_manager(login, make_user):
    admin = login(make_user(role="admin"))
    manager = make_user(role="manager")
    user = make_user()

    response = admin.patch(f"/api/admin/users/{user.id}", json={"role": "manager", "manager_id": manager.id})
    assert response.status_code == 200
    assert response.json()["role"] == "manager"
    assert response.json()["manager_id"] == manager.id


def test_user_cannot_manage_themselves(login, make_user):
    admin = login(make_user(role="admin"))
    user = make_user()

    response = admin.patch(f"/api/admin/users/{user.id}", json={"manager_id": user.id})
    assert response.status_code == 400


def test_invalid_role_is_rejected(login, make_user):
    admin = login(make_user(role="admin"))
    user = make_user()
    assert admin.patch(f"/api/admin/users/{user.id}", json={"role": "superuser"}).status_code == 400


def test_non_admin_cannot_update_users(login, make_user):
    user = make_user()
    assert login(make_user(role="manager")).patch(f"/api/admin/users/{user.id}", json={"role": "admin"}).status_code == 403


def test_deleting_manager_clears_team_manager_id(app, login, make_user):
    admin = login(make_user(role="admin"))
    manager = make_user(role="manager")
    member_ids = [make_user(manager=manager).id, make_user(manager=manager).id]

    response = admin.delete(f"/api/admin/users/{manager.id}")
    assert response.status_code == 204

    session = app.state.session_factory()
    try:
        members = session.query(User).filter(User.id.in_(member_ids)).all()
        assert len(members) == 2
        assert all(member.manager_id is None for member in members)
    finally:
        session.close()


def test_admin_cannot_delete_self(make_user, login):
    admin_user = make_user(role="admin")
    assert login(admin_user).delete(f"/api/admin/users/{admin_user.id}").status_code == 400


def test_delete_unknown_user_is_404(login, make_user):
    assert login(make_user(role="admin")).delete("/api/admin/users/9999").status_code == 404
