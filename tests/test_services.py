from __future__ import annotations

import pytest

from conftest import make_settings, opportunity_in, register
from volmatch.config import AppConfig, Matching
from volmatch.container import build_container
from volmatch.domain.errors import AuthenticationError, AuthorizationError, ConflictError, NotFoundError
from volmatch.domain.keywords import opportunity_keywords
from volmatch.domain.models import Nonprofit, PosterDetail, PublicVolunteer, Volunteer
from volmatch.repositories.applications import ApplicationsRepo
from volmatch.repositories.opportunities import OpportunitiesRepo
from volmatch.schemas import LoginIn, OpportunityUpdateIn, ProfileUpdateIn, RegisterIn


@pytest.mark.asyncio
async def test_register_login_and_authenticate(container):
    vol = await register(container, "alice", skills=["Python", "python ", "Design"])
    assert isinstance(vol, Volunteer)
    assert vol.skills == ["Python", "Design"]

    token, user = await container.auth.login(LoginIn(email="ALICE@example.org", password="secret123"))
    assert user.id == vol.id
    assert (await container.auth.authenticate(token)).id == vol.id


@pytest.mark.asyncio
async def test_duplicate_registration_conflicts(container):
    await register(container, "alice")
    with pytest.raises(ConflictError):
        await register(container, "alice")


@pytest.mark.asyncio
async def test_bad_credentials(container):
    await register(container, "alice")
    with pytest.raises(AuthenticationError):
        await container.auth.login(LoginIn(email="alice@example.org", password="wrong-pass"))
    with pytest.raises(AuthenticationError):
        await container.auth.login(LoginIn(email="nobody@example.org", password="secret123"))
    with pytest.raises(AuthenticationError):
        await container.auth.authenticate("not-a-token")


@pytest.mark.asyncio
async def test_create_stores_keywords(container):
    np_ = await register(container, "shelter", role="nonprofit")
    view = await container.opportunities.create(
        np_,
        opportunity_in(
            "Dog Walker",
            "Walk dogs at the shelter. Dogs need daily walks.",
            skills_required=["Animal Care"],
            category="Animals",
        ),
    )
    opp = view.opportunity
    assert opp.status == "open"
    assert opp.keywords[:3] == ["dogs", "walk", "shelter"]
    assert "animal" in opp.keywords and "care" in opp.keywords
    assert view.poster is not None and view.poster.id == np_.id


@pytest.mark.asyncio
async def test_create_keeps_text_as_sent(container):
    np_ = await register(container, "tutors", role="nonprofit")
    description = "Tutor kids in math <grades 3-5> weekly; AT&amp;T sponsors"
    view = await container.opportunities.create(
        np_, opportunity_in("Math Tutor", description, skills_required=["Math"], category="Education")
    )
    opp = view.opportunity
    assert opp.description == description
    assert opp.keywords == opportunity_keywords(description, ["Math"], "Education", "Math Tutor")
    assert "grades" in opp.keywords and "3-5" in opp.keywords and "amp" in opp.keywords

    stored, _ = await container.opportunities.get(opp.id)
    assert stored.description == description
    assert stored.keywords == opp.keywords


@pytest.mark.asyncio
async def test_only_nonprofits_create(container):
    vol = await register(container, "alice")
    with pytest.raises(AuthorizationError):
        await container.opportunities.create(vol, opportunity_in("Anything"))


@pytest.mark.asyncio
async def test_recommended_end_to_end(container):
    np_ = await register(container, "helpers", role="nonprofit")
    vol = await register(container, "alice", skills=["python", "design"], interests=["education"])
    o1 = (
        await container.opportunities.create(
            np_, opportunity_in("Coding club", "Run an education outreach session", skills_required=["python", "writing"])
        )
    ).opportunity
    o2 = (
        await container.opportunities.create(
            np_, opportunity_in("Poster help", "Help the animals team", skills_required=["design"])
        )
    ).opportunity
    closed = (
        await container.opportunities.create(np_, opportunity_in("Old", skills_required=["python", "design"]))
    ).opportunity
    await container.opportunities.close(np_, closed.id)

    ranked = await container.opportunities.recommended(vol)
    assert [(r.opportunity.id, r.match_score) for r in ranked] == [(o1.id, 2), (o2.id, 1)]
    assert ranked[0].poster is not None and ranked[0].poster.username == "helpers"


@pytest.mark.asyncio
async def test_recommended_rejects_nonprofit(container):
    np_ = await register(container, "helpers", role="nonprofit")
    with pytest.raises(AuthorizationError):
        await container.opportunities.recommended(np_)


@pytest.mark.asyncio
async def test_recommended_volunteers(container):
    owner = await register(container, "helpers", role="nonprofit")
    other = await register(container, "others", role="nonprofit")
    a = await register(container, "alice", skills=["python"])
    b = await register(container, "bob", skills=["python", "design"])
    await register(container, "carol", skills=["cooking"])
    opp = (
        await container.opportunities.create(owner, opportunity_in("Build site", skills_required=["python", "design"]))
    ).opportunity

    ranked = await container.opportunities.recommended_volunteers(owner, opp.id)
    assert [(r.volunteer.id, r.match_score) for r in ranked][:2] == [(b.id, 2), (a.id, 1)]
    assert len(ranked) == 3
    assert all(isinstance(r.volunteer, PublicVolunteer) for r in ranked)

    with pytest.raises(AuthorizationError):
        await container.opportunities.recommended_volunteers(other, opp.id)
    with pytest.raises(AuthorizationError):
        await container.opportunities.recommended_volunteers(a, opp.id)
    with pytest.raises(NotFoundError):
        await container.opportunities.recommended_volunteers(owner, opp.id + 100)


@pytest.mark.asyncio
async def test_update_recomputes_keywords(container):
    np_ = await register(container, "helpers", role="nonprofit")
    opp = (await container.opportunities.create(np_, opportunity_in("Garden", "Plant trees"))).opportunity
    assert "trees" in opp.keywords

    view = await container.opportunities.update(
        np_, opp.id, OpportunityUpdateIn(description="Paint murals downtown")
    )
    assert view.opportunity.description == "Paint murals downtown"
    assert "murals" in view.opportunity.keywords
    assert "trees" not in view.opportunity.keywords
    assert "garden" in view.opportunity.keywords
    assert view.opportunity.updated_at is not None

    view = await container.opportunities.update(np_, opp.id, OpportunityUpdateIn(location="Riverside"))
    assert view.opportunity.location == "Riverside"
    assert "murals" in view.opportunity.keywords


@pytest.mark.asyncio
async def test_update_keeps_keywords_when_disabled():
    cfg = AppConfig(matching=Matching(recompute_keywords_on_update=False))
    c = await build_container(make_settings(), cfg)
    try:
        np_ = await register(c, "helpers", role="nonprofit")
        opp = (await c.opportunities.create(np_, opportunity_in("Garden", "Plant trees"))).opportunity
        view = await c.opportunities.update(np_, opp.id, OpportunityUpdateIn(description="Paint murals"))
        assert view.opportunity.keywords == opp.keywords
    finally:
        await c.close()


@pytest.mark.asyncio
async def test_owner_checks_on_mutations(container):
    owner = await register(container, "helpers", role="nonprofit")
    other = await register(container, "others", role="nonprofit")
    opp = (await container.opportunities.create(owner, opportunity_in("Garden"))).opportunity

    with pytest.raises(AuthorizationError):
        await container.opportunities.update(other, opp.id, OpportunityUpdateIn(title="Mine now"))
    with pytest.raises(AuthorizationError):
        await container.opportunities.close(other, opp.id)
    with pytest.raises(AuthorizationError):
        await container.opportunities.delete(other, opp.id)
    with pytest.raises(NotFoundError):
        await container.opportunities.close(owner, opp.id + 1)


@pytest.mark.asyncio
async def test_browse_filters_and_mine(container):
    a = await register(container, "helpers", role="nonprofit")
    b = await register(container, "others", role="nonprofit")
    first = (await container.opportunities.create(a, opportunity_in("One", category="Animals"))).opportunity
    await container.opportunities.create(a, opportunity_in("Two", category="Education"))
    await container.opportunities.create(b, opportunity_in("Three", category="Animals"))
    await container.opportunities.close(a, first.id)

    titles = lambda views: [v.opportunity.title for v in views]  # noqa: E731
    assert titles(await container.opportunities.browse()) == ["Three", "Two", "One"]
    assert titles(await container.opportunities.browse(status="open")) == ["Three", "Two"]
    assert titles(await container.opportunities.browse(category="Animals")) == ["Three", "One"]
    assert titles(await container.opportunities.mine(a)) == ["Two", "One"]

    opp, poster = await container.opportunities.get(first.id)
    assert opp.status == "closed"
    assert isinstance(poster, PosterDetail) and poster.id == a.id


@pytest.mark.asyncio
async def test_apply_flow(container):
    owner = await register(container, "helpers", role="nonprofit")
    other = await register(container, "others", role="nonprofit")
    vol = await register(container, "alice")
    opp = (await container.opportunities.create(owner, opportunity_in("Garden"))).opportunity

    app = await container.applications.apply(vol, opp.id)
    assert app.status == "applied"
    with pytest.raises(ConflictError):
        await container.applications.apply(vol, opp.id)
    with pytest.raises(AuthorizationError):
        await container.applications.apply(owner, opp.id)
    with pytest.raises(NotFoundError):
        await container.applications.apply(vol, opp.id + 1)

    mine = await container.applications.mine(vol)
    assert [(v.application.id, v.opportunity_title) for v in mine] == [(app.id, "Garden")]

    with pytest.raises(AuthorizationError):
        await container.applications.for_opportunity(other, opp.id)
    listed = await container.applications.for_opportunity(owner, opp.id)
    assert listed[0].volunteer is not None and listed[0].volunteer.email == "alice@example.org"

    with pytest.raises(AuthorizationError):
        await container.applications.review(other, app.id, "accepted")
    reviewed = await container.applications.review(owner, app.id, "accepted")
    assert reviewed.status == "accepted" and reviewed.reviewed_at is not None
    with pytest.raises(ConflictError):
        await container.applications.review(owner, app.id, "rejected")


@pytest.mark.asyncio
async def test_cannot_apply_to_closed(container):
    owner = await register(container, "helpers", role="nonprofit")
    vol = await register(container, "alice")
    opp = (await container.opportunities.create(owner, opportunity_in("Garden"))).opportunity
    await container.opportunities.close(owner, opp.id)
    with pytest.raises(ConflictError):
        await container.applications.apply(vol, opp.id)


@pytest.mark.asyncio
async def test_delete_removes_applications(container):
    owner = await register(container, "helpers", role="nonprofit")
    vol = await register(container, "alice")
    opp = (await container.opportunities.create(owner, opportunity_in("Garden"))).opportunity
    await container.applications.apply(vol, opp.id)

    await container.opportunities.delete(owner, opp.id)
    with pytest.raises(NotFoundError):
        await container.opportunities.get(opp.id)
    assert await container.applications.mine(vol) == []


@pytest.mark.asyncio
async def test_profiles(container):
    vol = await register(container, "alice", skills=["python"])
    np_ = await register(container, "helpers", role="nonprofit")

    own = await container.users.profile(vol, vol.id)
    assert isinstance(own, Volunteer) and own.email == "alice@example.org"
    seen = await container.users.profile(np_, vol.id)
    assert isinstance(seen, PublicVolunteer)
    seen = await container.users.profile(vol, np_.id)
    assert isinstance(seen, PosterDetail)
    with pytest.raises(NotFoundError):
        await container.users.profile(vol, 999)

    updated = await container.users.update_profile(
        vol, vol.id, ProfileUpdateIn(school="MIT", skills=["Go", "go"], organization_description="ignored")
    )
    assert isinstance(updated, Volunteer)
    assert updated.school == "MIT" and updated.skills == ["Go"]
    with pytest.raises(AuthorizationError):
        await container.users.update_profile(np_, vol.id, ProfileUpdateIn(name="Hacked"))

    updated_np = await container.users.update_profile(np_, np_.id, ProfileUpdateIn(website="https://x.org"))
    assert isinstance(updated_np, Nonprofit) and updated_np.website == "https://x.org"

    vols = await container.users.volunteers()
    assert [v.username for v in vols] == ["alice"]


def test_register_payload_validation():
    with pytest.raises(ValueError):
        RegisterIn(name="A", username="a b", email="a@example.org", password="secret123", role="volunteer")
    with pytest.raises(ValueError):
        RegisterIn(name="A", username="ab", email="not-an-email", password="secret123", role="volunteer")
    with pytest.raises(ValueError):
        RegisterIn(name="A", username="ab", email="a@example.org", password="secret123", role="admin")
    ok = RegisterIn.model_validate(
        {"name": "A", "username": "ab", "email": "A@Example.org", "password": "secret123", "role": "nonprofit",
         "neededSkills": ["x"]}
    )
    assert ok.email == "a@example.org" and ok.needed_skills == ["x"]


@pytest.mark.asyncio
async def test_row_gone_mid_transaction_is_not_found(container, monkeypatch):
    owner = await register(container, "helpers", role="nonprofit")
    vol = await register(container, "alice")
    opp = (await container.opportunities.create(owner, opportunity_in("Garden"))).opportunity
    app = await container.applications.apply(vol, opp.id)

    async def vanished(self, *args, **kwargs):
        return None

    monkeypatch.setattr(OpportunitiesRepo, "set_status", vanished)
    monkeypatch.setattr(OpportunitiesRepo, "update", vanished)
    monkeypatch.setattr(ApplicationsRepo, "set_status", vanished)

    with pytest.raises(NotFoundError):
        await container.opportunities.close(owner, opp.id)
    with pytest.raises(NotFoundError):
        await container.opportunities.update(owner, opp.id, OpportunityUpdateIn(title="Orchard"))
    with pytest.raises(NotFoundError):
        await container.applications.review(owner, app.id, "accepted")
