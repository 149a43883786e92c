from __future__ import annotations

import pytest

from reward_service.app.exceptions import (
    Forbidden,
    InvalidTransition,
    NotFound,
    Unauthorized,
    ValidationError,
)
from reward_service.app.models.context import RequestContext
from reward_service.app.models.video import VideoStatus


@pytest.fixture
def queued(world):
    uploader = world.add_user("uploader", coins=1250)
    admin = world.add_user("admin", is_admin=True)
    video, _ = world.videos_service.submit(
        world.context_for(uploader), "https://example.com/v"
    )
    return uploader, admin, video


def test_admin_approves_pending_video_once(world, queued) -> None:
    _, admin, video = queued
    service = world.moderation_service

    approved = service.update_status(world.context_for(admin), video.id, "approved")

    assert approved.status is VideoStatus.APPROVED
    assert approved.reviewed_by_user_id == admin.user_id
    assert approved.reviewed_at == world.clock()

    with pytest.raises(InvalidTransition):
        service.update_status(world.context_for(admin), video.id, "rejected")
    assert world.videos.find_by_id(video.id).status is VideoStatus.APPROVED


def test_rejected_video_stays_rejected(world, queued) -> None:
    _, admin, video = queued
    service = world.moderation_service
    service.update_status(world.context_for(admin), video.id, "rejected")

    with pytest.raises(InvalidTransition):
        service.update_status(world.context_for(admin), video.id, "approved")


@pytest.mark.parametrize("status", ["pending", "deleted", ""])
def test_only_terminal_targets_are_accepted(world, queued, status) -> None:
    _, admin, video = queued

    with pytest.raises(ValidationError):
        world.moderation_service.update_status(world.context_for(admin), video.id, status)


def test_unknown_video_is_not_found(world, queued) -> None:
    _, admin, _ = queued

    with pytest.raises(NotFound):
        world.moderation_service.update_status(
            world.context_for(admin), "video-999", "approved"
        )


def test_non_admin_cannot_moderate(world, queued) -> None:
    uploader, _, video = queued
    service = world.moderation_service

    with pytest.raises(Forbidden):
        service.update_status(world.context_for(uploader), video.id, "approved")
    with pytest.raises(Unauthorized):
        service.admin_data(RequestContext.anonymous())
    assert world.videos.find_by_id(video.id).status is VideoStatus.PENDING


def test_admin_data_lists_queue_with_submitter_names(world, queued) -> None:
    uploader, admin, video = queued

    data = world.moderation_service.admin_data(world.context_for(admin))

    assert [(q.video.id, q.submitted_by_name) for q in data.videos] == [
        (video.id, "uploader")
    ]
    assert {u.name for u in data.users} == {"uploader", "admin"}
    assert not hasattr(data.users[0], "password_hash")


def test_admin_adjusts_coins_with_reason(world, queued) -> None:
    uploader, admin, _ = queued
    service = world.moderation_service

    balance = service.adjust_coins(world.context_for(admin), uploader.user_id, 40, "bonus")

    assert balance == 40
    with pytest.raises(ValidationError):
        service.adjust_coins(world.context_for(admin), uploader.user_id, 5, "  ")
    with pytest.raises(Forbidden):
        service.adjust_coins(world.context_for(uploader), uploader.user_id, 5, "self")
