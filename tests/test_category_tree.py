"""
Tests for the per-user category forest.

Covers:
- Default roots seeded with the user, fixed order of their ids
- Create: parent ownership, sibling and root-level label uniqueness
- Reads: direct children, iterative subtree expansion, trees, roots
- Update: canonical roots protected, cycle prevention, conflicts
- Remove and recipe links
"""

import random

import pytest
from sqlalchemy.orm import Session

from test_fixtures import database, db_session, make_user, make_recipe_payload
from app.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceValidationError,
    UnauthorizedError,
)
from domain.models import Category, RecipeCategory
from domain.schemas import CategoryUpdate
from services import CategoryTree, RecipeAggregate


# =============================================================================
# DEFAULT ROOTS
# =============================================================================


def test_new_user_gets_four_default_roots(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)

    roots = tree.get_roots(user.username)
    ids = tree.get_default_category_ids(user.username)

    assert [r.label for r in roots] == ["cuisines", "diets", "courses", "occasions"]
    assert ids == [r.id for r in roots]
    assert tree.get_root_ids(user.username) == ids


def test_roots_for_unknown_user_are_empty(db_session: Session):
    tree = CategoryTree(db_session)
    assert tree.get_roots("nobody") == []
    assert tree.get_root_ids("nobody") == []


def test_default_ids_missing_raises(db_session: Session):
    with pytest.raises(NotFoundError):
        CategoryTree(db_session).get_default_category_ids("nobody")


# =============================================================================
# CREATE
# =============================================================================


def test_create_child_normalizes_label(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines = tree.get_default_category_ids(user.username)[0]

    category = tree.create(user.username, "  Thai  ", cuisines)

    assert category.label == "thai"
    assert category.parent_id == cuisines
    assert tree.get(user.username, cuisines).children == [category.id]


def test_create_rejects_label_longer_than_column(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines = tree.get_default_category_ids(user.username)[0]

    with pytest.raises(ServiceValidationError):
        tree.create(user.username, "x" * 26, cuisines)
    assert tree.create(user.username, "x" * 25, cuisines).label == "x" * 25


def test_create_duplicate_sibling_conflicts(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines = tree.get_default_category_ids(user.username)[0]
    tree.create(user.username, "thai", cuisines)

    with pytest.raises(ConflictError):
        tree.create(user.username, "Thai", cuisines)


def test_same_label_under_different_parents_is_allowed(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines, diets = tree.get_default_category_ids(user.username)[:2]

    a = tree.create(user.username, "asian", cuisines)
    b = tree.create(user.username, "asian", diets)

    assert a.id != b.id


def test_root_level_duplicate_conflicts_per_owner(db_session: Session):
    """
    Verifies:
    - A second root with a taken label conflicts for the same owner
    - Another user may use the same root label
    """
    alice = make_user(db_session)
    bob = make_user(db_session, profile_type="baker")
    tree = CategoryTree(db_session)

    tree.create(alice.username, "weeknight")
    with pytest.raises(ConflictError):
        tree.create(alice.username, "weeknight")
    with pytest.raises(ConflictError):
        tree.create(alice.username, "cuisines")

    assert tree.create(bob.username, "weeknight").parent_id is None


def test_create_under_missing_parent_is_not_found(db_session: Session):
    user = make_user(db_session)
    with pytest.raises(NotFoundError):
        CategoryTree(db_session).create(user.username, "thai", 99999)


def test_create_under_foreign_parent_is_unauthorized(db_session: Session):
    alice = make_user(db_session)
    bob = make_user(db_session, profile_type="baker")
    tree = CategoryTree(db_session)
    bobs_root = tree.get_default_category_ids(bob.username)[0]

    with pytest.raises(UnauthorizedError):
        tree.create(alice.username, "thai", bobs_root)


# =============================================================================
# READS
# =============================================================================


def _build_chain(tree: CategoryTree, username: str):
    cuisines = tree.get_default_category_ids(username)[0]
    asian = tree.create(username, "asian", cuisines)
    thai = tree.create(username, "thai", asian.id)
    issan = tree.create(username, "issan", thai.id)
    japanese = tree.create(username, "japanese", asian.id)
    return cuisines, asian, thai, issan, japanese


def test_get_returns_direct_children_only(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    _, asian, thai, _, japanese = _build_chain(tree, user.username)

    detail = tree.get(user.username, asian.id)

    assert detail.children == [thai.id, japanese.id]
    assert detail.recipes == []


def test_get_other_users_category_is_not_found(db_session: Session):
    alice = make_user(db_session)
    bob = make_user(db_session, profile_type="baker")
    tree = CategoryTree(db_session)
    bobs_root = tree.get_default_category_ids(bob.username)[0]

    with pytest.raises(NotFoundError):
        tree.get(alice.username, bobs_root)


def test_subtree_is_fully_expanded(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines, asian, thai, issan, japanese = _build_chain(tree, user.username)

    node = tree.get_subtree(user.username, cuisines)

    assert node.label == "cuisines"
    assert [c.id for c in node.children] == [asian.id]
    asian_node = node.children[0]
    assert [c.label for c in asian_node.children] == ["thai", "japanese"]
    assert [c.id for c in asian_node.children[0].children] == [issan.id]
    assert asian_node.children[1].children == []


def test_subtree_survives_cyclic_data(db_session: Session):
    """
    Verifies:
    - A parent cycle written behind the service's back does not loop
    - Each node appears at most once in the expansion
    """
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    a = tree.create(user.username, "a")
    b = tree.create(user.username, "b", a.id)
    c = tree.create(user.username, "c", b.id)

    db_session.query(Category).filter(Category.id == a.id).update({"parent_id": c.id})
    db_session.commit()

    node = tree.get_subtree(user.username, a.id)
    seen = []
    stack = [node]
    while stack:
        current = stack.pop()
        seen.append(current.id)
        stack.extend(current.children)
    assert sorted(seen) == sorted([a.id, b.id, c.id])


def test_get_trees_expands_every_root(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    _build_chain(tree, user.username)

    trees = tree.get_trees(user.username)

    assert [t.label for t in trees] == ["cuisines", "diets", "courses", "occasions"]
    assert trees[0].children[0].label == "asian"


# =============================================================================
# UPDATE
# =============================================================================


def test_update_renames_and_moves(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines, diets = tree.get_default_category_ids(user.username)[:2]
    vegan = tree.create(user.username, "vegan", cuisines)

    updated = tree.update(
        user.username, vegan.id, CategoryUpdate(label="Plant Based", parent_id=diets)
    )

    assert updated.label == "plant based"
    assert updated.parent_id == diets


def test_update_canonical_root_is_forbidden(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines = tree.get_default_category_ids(user.username)[0]

    with pytest.raises(ForbiddenError):
        tree.update(user.username, cuisines, CategoryUpdate(label="food"))


def test_update_into_own_descendant_is_rejected(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    _, asian, _, issan, _ = _build_chain(tree, user.username)

    with pytest.raises(ServiceValidationError):
        tree.update(user.username, asian.id, CategoryUpdate(parent_id=issan.id))
    with pytest.raises(ServiceValidationError):
        tree.update(user.username, asian.id, CategoryUpdate(parent_id=asian.id))


def _parent_map(db: Session, username: str) -> dict:
    return {c.id: c.parent_id for c in db.query(Category).filter_by(username=username)}


def _is_within(parents: dict, node, ancestor) -> bool:
    """True when ``ancestor`` is ``node`` or one of its ancestors"""
    seen = set()
    while node is not None and node not in seen:
        if node == ancestor:
            return True
        seen.add(node)
        node = parents[node]
    return False


def _reaches_root(parents: dict, node) -> bool:
    seen = set()
    while node is not None:
        if node in seen:
            return False
        seen.add(node)
        node = parents[node]
    return True


@pytest.mark.parametrize("seed", [3, 11])
def test_random_reparenting_never_creates_cycles(db_session: Session, seed):
    """
    Verifies:
    - A move is rejected exactly when the new parent lies in the moved subtree
    - After every move each parent chain ends at a root
    """
    rng = random.Random(seed)
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    roots = tree.get_default_category_ids(user.username)
    movable = []
    for n in range(16):
        parent = rng.choice(roots + movable)
        movable.append(tree.create(user.username, f"node {n}", parent).id)

    for _ in range(400):
        category_id = rng.choice(movable)
        parent_id = rng.choice(roots + movable + [None])
        before = _parent_map(db_session, user.username)
        cyclic = parent_id is not None and _is_within(before, parent_id, category_id)

        try:
            tree.update(user.username, category_id, CategoryUpdate(parent_id=parent_id))
        except ServiceValidationError:
            assert cyclic
        else:
            assert not cyclic

        after = _parent_map(db_session, user.username)
        assert all(_reaches_root(after, node) for node in after)


def test_update_to_sibling_label_conflicts(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    _, _, thai, _, japanese = _build_chain(tree, user.username)

    with pytest.raises(ConflictError):
        tree.update(user.username, japanese.id, CategoryUpdate(label="thai"))

    # Keeping its own label is not a conflict
    assert tree.update(user.username, thai.id, CategoryUpdate(label="thai")).label == "thai"


def test_update_with_empty_payload_is_bad_request(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    thai = tree.create(user.username, "thai")

    with pytest.raises(ServiceValidationError):
        tree.update(user.username, thai.id, CategoryUpdate())


def test_update_missing_category_is_not_found(db_session: Session):
    user = make_user(db_session)
    with pytest.raises(NotFoundError):
        CategoryTree(db_session).update(user.username, 777, CategoryUpdate(label="x"))


# =============================================================================
# REMOVE AND LINKS
# =============================================================================


def test_remove_canonical_root_is_forbidden(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    cuisines = tree.get_default_category_ids(user.username)[0]

    with pytest.raises(ForbiddenError):
        tree.remove(user.username, cuisines)


def test_remove_cascades_to_descendants_and_links(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    _, asian, thai, issan, japanese = _build_chain(tree, user.username)
    recipe = RecipeAggregate(db_session).create(user.username, make_recipe_payload())
    tree.link_recipe(user.username, issan.id, recipe.id)

    tree.remove(user.username, asian.id)

    remaining = {c.id for c in db_session.query(Category).all()}
    assert not remaining & {asian.id, thai.id, issan.id, japanese.id}
    assert db_session.query(RecipeCategory).filter_by(category_id=issan.id).count() == 0


def test_remove_missing_category_is_not_found(db_session: Session):
    user = make_user(db_session)
    with pytest.raises(NotFoundError):
        CategoryTree(db_session).remove(user.username, 4040)


def test_link_and_unlink_recipe(db_session: Session):
    user = make_user(db_session)
    tree = CategoryTree(db_session)
    favourites = tree.create(user.username, "favourites")
    recipe = RecipeAggregate(db_session).create(user.username, make_recipe_payload())

    tree.link_recipe(user.username, favourites.id, recipe.id)
    assert tree.get(user.username, favourites.id).recipes == [recipe.id]

    with pytest.raises(ConflictError):
        tree.link_recipe(user.username, favourites.id, recipe.id)

    tree.unlink_recipe(user.username, favourites.id, recipe.id)
    assert tree.get(user.username, favourites.id).recipes == []

    with pytest.raises(NotFoundError):
        tree.unlink_recipe(user.username, favourites.id, recipe.id)


def test_link_foreign_recipe_is_not_found(db_session: Session):
    alice = make_user(db_session)
    bob = make_user(db_session, profile_type="baker")
    tree = CategoryTree(db_session)
    alices = tree.create(alice.username, "favourites")
    bobs_recipe = RecipeAggregate(db_session).create(bob.username, make_recipe_payload())

    with pytest.raises(NotFoundError):
        tree.link_recipe(alice.username, alices.id, bobs_recipe.id)
