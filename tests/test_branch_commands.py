"""Tests for the branch creation, deletion and default branch commands."""

from __future__ import annotations

from dataclasses import replace

from branch_commands import (CreateBranchesCommand, DeleteBranchesCommand,
                             UpdateDefaultCommand)
from errors import ForgeError
from fake_forge import MASTER_SHA, FakeForge
from models import BranchProtection, PullRequestReviews


def test_create_branches_off_base_head(cfg, fake_forge, logger) -> None:
    """Each branch should be created at the head SHA of the base branch."""
    command = CreateBranchesCommand(
        cfg, fake_forge, logger, branches=['update-references', 'main']
    )

    assert command.run() == 0, logger.stderr.getvalue()

    output = logger.stdout.getvalue()
    assert 'Creating new branch update-references off of master' in output
    assert 'Creating new branch main off of master' in output
    assert 'Success!' in output

    created = fake_forge.created_refs
    assert [ref.ref for ref in created] == ['refs/heads/update-references', 'refs/heads/main']
    assert all(ref.sha == MASTER_SHA for ref in created)


def test_create_branches_defaults_to_temp_and_target(cfg, fake_forge, logger) -> None:
    command = CreateBranchesCommand(cfg, fake_forge, logger)

    assert command.branches == ['update-references', 'main']


def test_create_branches_looks_up_base_for_every_branch(cfg, fake_forge, logger) -> None:
    """The base ref is fetched once per created branch, never cached."""
    CreateBranchesCommand(cfg, fake_forge, logger, branches=['a', 'b', 'c']).run()

    assert fake_forge.calls_to('get_ref') == [('hashicorp', 'test', 'refs/heads/master')] * 3


def test_create_branches_missing_base_fails(cfg, fake_forge, logger) -> None:
    fake_forge.refs.clear()

    exit_code = CreateBranchesCommand(cfg, fake_forge, logger).run()

    assert exit_code == 1
    assert fake_forge.created_refs == []
    errors = logger.stderr.getvalue()
    assert 'branch=update-references' in errors
    assert '404' in errors


def test_create_branches_keeps_earlier_branches_on_failure(cfg, fake_forge, logger) -> None:
    """A failure part way through does not roll back branches already made."""
    fake_forge.refs['refs/heads/main'] = 'existing'

    exit_code = CreateBranchesCommand(
        cfg, fake_forge, logger, branches=['update-references', 'main']
    ).run()

    assert exit_code == 1
    assert [ref.ref for ref in fake_forge.created_refs] == ['refs/heads/update-references']
    assert 'Failed to create branch: branch=main' in logger.stderr.getvalue()
    assert 'Success!' not in logger.stdout.getvalue()


def test_wrong_repository_is_rejected(cfg, logger) -> None:
    """The fake refuses calls for another repo, surfacing wiring mistakes."""
    forge = FakeForge(owner='someone-else')

    assert CreateBranchesCommand(cfg, forge, logger).run() == 1
    assert 'must be called for someone-else/test' in logger.stderr.getvalue()


def test_delete_branches(cfg, fake_forge, logger) -> None:
    fake_forge.refs['refs/heads/update-references'] = MASTER_SHA
    fake_forge.protections['master'] = BranchProtection(enforce_admins=True)

    exit_code = DeleteBranchesCommand(cfg, fake_forge, logger).run()

    assert exit_code == 0, logger.stderr.getvalue()
    assert fake_forge.removed_protections == ['master']
    assert fake_forge.deleted_refs == ['refs/heads/update-references', 'refs/heads/master']
    output = logger.stdout.getvalue()
    assert 'Attempting to remove branch protection from branch: branch=master' in output
    assert 'Attempting to delete branch: branch=master' in output
    assert 'Success! branch has been deleted: branch=master ref=refs/heads/master' in output


def test_delete_unprotected_branch_still_succeeds(cfg, fake_forge, logger) -> None:
    """Missing protection is only a warning."""
    command = DeleteBranchesCommand(cfg, fake_forge, logger, branches=['master'])

    assert command.run() == 0
    assert fake_forge.deleted_refs == ['refs/heads/master']
    assert 'could not remove branch protection' in logger.stdout.getvalue()


def test_delete_already_deleted_branch_still_succeeds(cfg, fake_forge, logger) -> None:
    command = DeleteBranchesCommand(cfg, fake_forge, logger, branches=['gone', 'master'])

    assert command.run() == 0
    assert fake_forge.deleted_refs == ['refs/heads/master']
    assert 'failed to delete ref' in logger.stdout.getvalue()


def test_update_default_flips_branch_and_copies_protection(cfg, fake_forge, logger) -> None:
    fake_forge.protections['master'] = BranchProtection(
        enforce_admins=True,
        required_pull_request_reviews=PullRequestReviews(required_approving_review_count=2),
    )

    exit_code = UpdateDefaultCommand(replace(cfg, command='updateDefault'), fake_forge, logger).run()

    assert exit_code == 0, logger.stderr.getvalue()
    assert fake_forge.default_branch == 'main'
    [(branch, request)] = fake_forge.protection_updates
    assert branch == 'main'
    assert request.enforce_admins is True
    assert request.required_pull_request_reviews.required_approving_review_count == 2


def test_update_default_without_base_protection(cfg, fake_forge, logger) -> None:
    """An unprotected base branch is not an error."""
    exit_code = UpdateDefaultCommand(cfg, fake_forge, logger).run()

    assert exit_code == 0
    assert fake_forge.default_branch == 'main'
    assert fake_forge.protection_updates == []
    assert "isn't protected" in logger.stdout.getvalue()


def test_update_default_warns_when_protection_copy_fails(cfg, fake_forge, logger) -> None:
    """The flip is kept and the partial state is reported separately."""
    fake_forge.protections['master'] = BranchProtection(enforce_admins=True)
    fake_forge.failures['update_branch_protection'] = ForgeError(
        'update branch protection of main', '403 Forbidden', status=403
    )

    exit_code = UpdateDefaultCommand(cfg, fake_forge, logger).run()

    assert exit_code == 1
    assert fake_forge.default_branch == 'main'
    assert 'default branch is now main but branch protection from master was not copied' in (
        logger.stdout.getvalue()
    )
    assert '403 Forbidden' in logger.stderr.getvalue()


def test_update_default_edit_failure_skips_protection(cfg, fake_forge, logger) -> None:
    fake_forge.failures['edit_default_branch'] = ForgeError(
        'edit default branch of hashicorp/test', '422 Validation Failed', status=422
    )

    exit_code = UpdateDefaultCommand(cfg, fake_forge, logger).run()

    assert exit_code == 1
    assert fake_forge.calls_to('get_branch_protection') == []
    assert 'was not copied' not in logger.stdout.getvalue()
