"""Tests for the permission resolution engine."""

from __future__ import annotations

import pytest
from conftest import account_folder, inherited_folder, local_folder, make_grant

from governcore import (
    AccessLevel,
    Group,
    InheritanceMode,
    IntegrityError,
    NotFoundError,
    Project,
    ResolutionEngine,
    ResourceRef,
    ResourceType,
    TargetType,
    UserPrincipal,
    merge_grants,
)

U1 = UserPrincipal("u1")


def resolve(snapshot, user: UserPrincipal, resource: ResourceRef):
    return ResolutionEngine.from_snapshot(snapshot).resolve(user, resource)


class TestScenarios:
    """End-to-end scenarios across the three inheritance modes."""

    def test_direct_read_on_local_folder(self, world) -> None:
        """Read grant on a local folder of a none-mode project resolves to read."""
        snap = world.with_grant(make_grant("g1", ResourceType.FOLDER, "f-none-local", "u1", "read"))
        result = resolve(snap, U1, ResourceRef.folder("f-none-local"))
        assert result.level == AccessLevel.READ
        assert result.contributing_grant_ids == ("g1",)

    def test_group_write_on_project_and_admin_on_origin(self, world) -> None:
        """Inherited folder takes the admin grant on its origin over a group write on the project."""
        snap = world.with_grant(
            make_grant("g-grp", ResourceType.PROJECT, "p-full", "g-eng", "write", target_type=TargetType.GROUP)
        ).with_grant(make_grant("g-adm", ResourceType.FOLDER, "origin", "u1", "admin"))

        assert resolve(snap, U1, ResourceRef.folder("f-full-inherited")).level == AccessLevel.ADMIN
        assert resolve(snap, U1, ResourceRef.project("p-full")).level == AccessLevel.WRITE

    def test_local_folder_in_full_project_never_inherits(self, world) -> None:
        """Account-level admin on an unrelated origin does not reach a local folder."""
        result = resolve(world, UserPrincipal("u-origin"), ResourceRef.folder("f-full-local"))
        assert result.level == AccessLevel.NONE
        assert result.contributing_grants == ()

    def test_unknown_user_resolves_to_none(self, world) -> None:
        result = resolve(world, UserPrincipal("nobody"), ResourceRef.project("p-full"))
        assert result.level == AccessLevel.NONE
        assert not result.granted


class TestProjectInheritance:
    """Account contribution to a project's own resolution."""

    @pytest.fixture
    def account_admin(self, world):
        return world.with_grant(make_grant("g-acct", ResourceType.ACCOUNT, "a1", "u1", "admin"))

    def test_full_mode_unions_account(self, account_admin) -> None:
        result = resolve(account_admin, U1, ResourceRef.project("p-full"))
        assert result.level == AccessLevel.ADMIN
        assert result.contributing_grant_ids == ("g-acct",)

    def test_partial_mode_ignores_account(self, account_admin) -> None:
        assert resolve(account_admin, U1, ResourceRef.project("p-partial")).level == AccessLevel.NONE

    def test_none_mode_ignores_account(self, account_admin) -> None:
        assert resolve(account_admin, U1, ResourceRef.project("p-none")).level == AccessLevel.NONE

    def test_account_grant_via_group(self, world) -> None:
        snap = world.with_grant(
            make_grant("g-acct-grp", ResourceType.ACCOUNT, "a1", "g-eng", "read", target_type=TargetType.GROUP)
        )
        assert resolve(snap, UserPrincipal("u2"), ResourceRef.project("p-full")).level == AccessLevel.READ

    def test_account_resource_resolves_its_own_grants(self, account_admin) -> None:
        assert resolve(account_admin, U1, ResourceRef.account("a1")).level == AccessLevel.ADMIN
        assert resolve(account_admin, U1, ResourceRef.account("a2")).level == AccessLevel.NONE

    def test_folders_do_not_take_account_grants(self, account_admin) -> None:
        """Account-resource grants only flow into full projects, not their folders."""
        assert resolve(account_admin, U1, ResourceRef.folder("f-full-local")).level == AccessLevel.NONE
        assert resolve(account_admin, U1, ResourceRef.folder("f-full-inherited")).level == AccessLevel.NONE


class TestFolderInheritance:
    """Origin-folder contribution to inherited folders."""

    def test_full_mode_inherited_folder_gets_origin_admin(self, world) -> None:
        result = resolve(world, UserPrincipal("u-origin"), ResourceRef.folder("f-full-inherited"))
        assert result.level == AccessLevel.ADMIN
        assert result.contributing_grant_ids == ("g-origin-admin",)

    def test_partial_mode_inherited_folder_gets_origin(self, world) -> None:
        result = resolve(world, UserPrincipal("u-origin"), ResourceRef.folder("f-partial-inherited"))
        assert result.level == AccessLevel.ADMIN

    def test_partial_mode_local_folder_is_contained(self, world) -> None:
        """Account grants not linked through an inherited folder never reach partial folders."""
        u9 = UserPrincipal("u9")
        snap = world.with_grant(make_grant("g-acct", ResourceType.ACCOUNT, "a1", "u9", "admin")).with_grant(
            make_grant("g-unrelated", ResourceType.FOLDER, "unrelated", "u9", "admin")
        )
        for folder_id in ("f-partial-local", "f-partial-inherited"):
            assert resolve(snap, u9, ResourceRef.folder(folder_id)).level == AccessLevel.NONE

    def test_local_grant_and_origin_grant_merge_to_max(self, world) -> None:
        snap = world.with_grant(make_grant("g-local", ResourceType.FOLDER, "f-full-inherited", "u-origin", "read"))
        result = resolve(snap, UserPrincipal("u-origin"), ResourceRef.folder("f-full-inherited"))
        assert result.level == AccessLevel.ADMIN
        assert result.contributing_grant_ids == ("g-origin-admin",)

    def test_origin_chain_is_followed(self, world) -> None:
        """An origin that is itself inherited contributes its own origin's grants."""
        snap = world.with_folder(inherited_folder("mid", "p-full", "origin")).with_folder(
            inherited_folder("leaf", "p-full", "mid")
        )
        assert resolve(snap, UserPrincipal("u-origin"), ResourceRef.folder("leaf")).level == AccessLevel.ADMIN

    def test_account_level_folder_resolves_directly(self, world) -> None:
        assert resolve(world, UserPrincipal("u-origin"), ResourceRef.folder("origin")).level == AccessLevel.ADMIN

    def test_subfolder_does_not_take_parent_grants(self, world) -> None:
        snap = world.with_folder(local_folder("child", "p-full", parent_folder_id="f-full-local")).with_grant(
            make_grant("g-parent", ResourceType.FOLDER, "f-full-local", "u1", "write")
        )
        assert resolve(snap, U1, ResourceRef.folder("child")).level == AccessLevel.NONE


class TestFailures:
    """NotFound and integrity failures abort without a partial result."""

    def test_unknown_folder(self, world) -> None:
        with pytest.raises(NotFoundError):
            resolve(world, U1, ResourceRef.folder("missing"))

    def test_unknown_project(self, world) -> None:
        with pytest.raises(NotFoundError):
            resolve(world, U1, ResourceRef.project("missing"))

    def test_missing_origin_folder(self, world) -> None:
        snap = world.with_folder(inherited_folder("orphan", "p-full", "gone"))
        with pytest.raises(NotFoundError):
            resolve(snap, U1, ResourceRef.folder("orphan"))

    def test_cyclic_origin_chain(self, world) -> None:
        snap = world.with_folder(inherited_folder("x", "p-full", "y")).with_folder(
            inherited_folder("y", "p-full", "x")
        )
        with pytest.raises(IntegrityError) as exc_info:
            resolve(snap, U1, ResourceRef.folder("x"))
        assert exc_info.value.code == "INTEGRITY_ERROR"

    def test_self_referencing_origin(self, world) -> None:
        snap = world.with_folder(inherited_folder("loop", "p-full", "loop"))
        with pytest.raises(IntegrityError):
            resolve(snap, U1, ResourceRef.folder("loop"))

    def test_origin_in_another_account(self, world) -> None:
        """Grants on another tenant's folder never leak through an origin link."""
        snap = (
            world.with_folder(account_folder("o2", account_id="a2"))
            .with_folder(inherited_folder("leak", "p-full", "o2"))
            .with_grant(make_grant("g2", ResourceType.FOLDER, "o2", "u1", "admin"))
        )
        with pytest.raises(IntegrityError, match="account a2"):
            resolve(snap, U1, ResourceRef.folder("leak"))

    def test_local_project_folder_as_origin(self, world) -> None:
        snap = world.with_folder(inherited_folder("copy", "p-partial", "f-full-local"))
        with pytest.raises(IntegrityError, match="local project folder"):
            resolve(snap, U1, ResourceRef.folder("copy"))

    def test_inherited_folder_in_none_mode_project(self, world) -> None:
        """A none-mode project still holding an inherited folder is a torn read."""
        snap = world.with_project(Project(id="p-full", account_id="a1", inheritance_mode=InheritanceMode.NONE))
        with pytest.raises(IntegrityError):
            resolve(snap, UserPrincipal("u-origin"), ResourceRef.folder("f-full-inherited"))

    def test_inconsistent_folder_state(self, world) -> None:
        snap = world.with_folder(local_folder("bad", "p-full", status="read-only"))
        with pytest.raises(IntegrityError, match="local folder is read-only"):
            resolve(snap, U1, ResourceRef.folder("bad"))


class TestProperties:
    """Invariants that hold for every principal and resource."""

    RESOURCES = [
        ResourceRef.project("p-none"),
        ResourceRef.project("p-full"),
        ResourceRef.project("p-partial"),
        ResourceRef.folder("f-none-local"),
        ResourceRef.folder("f-full-inherited"),
        ResourceRef.folder("f-full-local"),
        ResourceRef.folder("f-partial-inherited"),
        ResourceRef.folder("f-partial-local"),
    ]

    def test_adding_a_grant_never_lowers_the_level(self, world) -> None:
        base = world.with_grant(make_grant("g-w", ResourceType.FOLDER, "f-full-local", "u1", "write"))
        for resource in self.RESOURCES:
            before = resolve(base, U1, resource).level
            for level in ("read", "write", "admin"):
                extra = make_grant(f"g-{level}", resource.resource_type, resource.resource_id, "g-eng", level,
                                   target_type=TargetType.GROUP)
                after = resolve(base.with_grant(extra), U1, resource).level
                assert after >= before, f"{resource} dropped from {before} to {after}"

    def test_none_mode_is_isolated_from_account_changes(self, world) -> None:
        before = [resolve(world, U1, r).level for r in (ResourceRef.project("p-none"), ResourceRef.folder("f-none-local"))]
        changed = world.with_grant(make_grant("g-acct", ResourceType.ACCOUNT, "a1", "u1", "admin")).with_grant(
            make_grant("g-origin-u1", ResourceType.FOLDER, "origin", "u1", "admin")
        )
        after = [resolve(changed, U1, r).level for r in (ResourceRef.project("p-none"), ResourceRef.folder("f-none-local"))]
        assert before == after

    def test_resolve_is_idempotent(self, world) -> None:
        snap = world.with_grant(make_grant("g1", ResourceType.FOLDER, "f-full-inherited", "u1", "admin")).with_grant(
            make_grant("g2", ResourceType.FOLDER, "origin", "g-eng", "admin", target_type=TargetType.GROUP)
        )
        engine = ResolutionEngine.from_snapshot(snap)
        first = engine.resolve(U1, ResourceRef.folder("f-full-inherited"))
        second = engine.resolve(U1, ResourceRef.folder("f-full-inherited"))
        assert first == second

    def test_ties_are_all_reported(self, world) -> None:
        snap = world.with_grant(make_grant("g1", ResourceType.FOLDER, "f-full-inherited", "u1", "admin")).with_grant(
            make_grant("g2", ResourceType.FOLDER, "origin", "g-eng", "admin", target_type=TargetType.GROUP)
        )
        result = resolve(snap, U1, ResourceRef.folder("f-full-inherited"))
        assert result.level == AccessLevel.ADMIN
        assert set(result.contributing_grant_ids) == {"g1", "g2"}

    def test_group_membership_change_is_seen_in_next_generation(self, world) -> None:
        snap = world.with_grant(
            make_grant("g-grp", ResourceType.PROJECT, "p-none", "g-eng", "write", target_type=TargetType.GROUP)
        )
        assert resolve(snap, UserPrincipal("u3"), ResourceRef.project("p-none")).level == AccessLevel.NONE
        joined = snap.with_group(Group(id="g-eng", member_user_ids={"u1", "u2", "u3"}))
        assert resolve(joined, UserPrincipal("u3"), ResourceRef.project("p-none")).level == AccessLevel.WRITE


class TestMergeGrants:
    """Tests for merge_grants."""

    def test_empty(self) -> None:
        assert merge_grants([]) == (AccessLevel.NONE, ())

    def test_max_wins(self) -> None:
        read = make_grant("r", ResourceType.PROJECT, "p", "u", "read")
        admin = make_grant("a", ResourceType.PROJECT, "p", "v", "admin")
        level, top = merge_grants([read, admin])
        assert level == AccessLevel.ADMIN
        assert top == (admin,)

    def test_contributing_order_is_stable(self) -> None:
        g1 = make_grant("1", ResourceType.PROJECT, "p", "b", "write")
        g2 = make_grant("2", ResourceType.PROJECT, "p", "a", "write")
        assert merge_grants([g1, g2])[1] == merge_grants([g2, g1])[1] == (g2, g1)
