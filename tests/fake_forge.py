"""In-memory forge that records calls for assertions."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from errors import ForgeError, NotFoundError
from models import (BranchProtection, MergeResult, NewPullRequest,
                    ProtectionRequest, PullRequest, Reference)

OWNER = 'hashicorp'
REPO = 'test'
MASTER_SHA = 'abc123'


class FakeForge:
    """Recording double for the forge capability interfaces.

    Calls made for any repository other than ``owner/repo`` fail, so wiring
    mistakes show up as command errors. ``failures`` maps a method name to
    the exception that method should raise.
    """

    def __init__(self, owner: str = OWNER, repo: str = REPO) -> None:
        self.owner = owner
        self.repo = repo
        self.refs: Dict[str, str] = {'refs/heads/master': MASTER_SHA}
        self.protections: Dict[str, BranchProtection] = {}
        self.pulls_by_number: Dict[int, PullRequest] = {}
        self.default_branch = 'master'
        self.merge_result = MergeResult(merged=True, message='merged', sha='def456')
        self.failures: Dict[str, Exception] = {}
        self.edit_failures: Dict[int, Exception] = {}

        self.calls: List[Tuple[str, tuple]] = []
        self.created_refs: List[Reference] = []
        self.deleted_refs: List[str] = []
        self.protection_updates: List[Tuple[str, ProtectionRequest]] = []
        self.removed_protections: List[str] = []
        self.created_pulls: List[NewPullRequest] = []
        self.edited_pulls: List[Tuple[int, Optional[str], Optional[str]]] = []
        self.merged_pulls: List[Tuple[int, str, str]] = []

        self.git = FakeGitRefs(self)
        self.repos = FakeRepositories(self)
        self.pulls = FakePullRequests(self)

    def add_pull(self, number: int, base: str = 'master', state: str = 'open') -> PullRequest:
        pull = PullRequest(
            number=number,
            url=f'https://api.github.com/repos/{self.owner}/{self.repo}/pulls/{number}',
            html_url=f'https://github.com/{self.owner}/{self.repo}/pull/{number}',
            state=state,
            base_ref=base,
            base_label=f'{self.owner}:{base}',
        )
        self.pulls_by_number[number] = pull
        return pull

    def record(self, method: str, owner: str, repo: str, *args) -> None:
        self.calls.append((method, (owner, repo) + args))
        if (owner, repo) != (self.owner, self.repo):
            raise ForgeError(
                method, f'must be called for {self.owner}/{self.repo}, got {owner}/{repo}'
            )
        failure = self.failures.get(method)
        if failure is not None:
            raise failure

    def calls_to(self, method: str) -> List[tuple]:
        return [args for name, args in self.calls if name == method]


class FakeGitRefs:
    def __init__(self, parent: FakeForge) -> None:
        self.parent = parent

    def get_ref(self, owner: str, repo: str, ref: str) -> Reference:
        self.parent.record('get_ref', owner, repo, ref)
        if ref not in self.parent.refs:
            raise NotFoundError(f'get ref {ref}', '404 Not Found')
        return Reference(ref=ref, sha=self.parent.refs[ref])

    def create_ref(self, owner: str, repo: str, reference: Reference) -> Reference:
        self.parent.record('create_ref', owner, repo, reference)
        if reference.ref in self.parent.refs:
            raise ForgeError(
                f'create ref {reference.ref}', '422 Reference already exists', status=422
            )
        self.parent.refs[reference.ref] = reference.sha
        self.parent.created_refs.append(reference)
        return reference

    def delete_ref(self, owner: str, repo: str, ref: str) -> None:
        self.parent.record('delete_ref', owner, repo, ref)
        if ref not in self.parent.refs:
            raise NotFoundError(f'delete ref {ref}', '422 Reference does not exist')
        del self.parent.refs[ref]
        self.parent.deleted_refs.append(ref)


class FakeRepositories:
    def __init__(self, parent: FakeForge) -> None:
        self.parent = parent

    def edit_default_branch(self, owner: str, repo: str, branch: str) -> None:
        self.parent.record('edit_default_branch', owner, repo, branch)
        self.parent.default_branch = branch

    def get_branch_protection(self, owner: str, repo: str, branch: str) -> BranchProtection:
        self.parent.record('get_branch_protection', owner, repo, branch)
        if branch not in self.parent.protections:
            raise NotFoundError(f'get branch protection of {branch}', '404 Branch not protected')
        return self.parent.protections[branch]

    def update_branch_protection(
        self, owner: str, repo: str, branch: str, request: ProtectionRequest
    ) -> None:
        self.parent.record('update_branch_protection', owner, repo, branch, request)
        self.parent.protection_updates.append((branch, request))

    def remove_branch_protection(self, owner: str, repo: str, branch: str) -> None:
        self.parent.record('remove_branch_protection', owner, repo, branch)
        if branch not in self.parent.protections:
            raise NotFoundError(
                f'remove branch protection of {branch}', '404 Branch not protected'
            )
        del self.parent.protections[branch]
        self.parent.removed_protections.append(branch)


class FakePullRequests:
    def __init__(self, parent: FakeForge) -> None:
        self.parent = parent

    def list(self, owner: str, repo: str, base: str, state: str = 'open') -> List[PullRequest]:
        self.parent.record('list_pulls', owner, repo, base, state)
        return [
            pull
            for _, pull in sorted(self.parent.pulls_by_number.items())
            if pull.base_ref == base and pull.state == state
        ]

    def create(self, owner: str, repo: str, new_pull: NewPullRequest) -> PullRequest:
        self.parent.record('create_pull', owner, repo, new_pull)
        self.parent.created_pulls.append(new_pull)
        number = max(self.parent.pulls_by_number, default=0) + 1
        return self.parent.add_pull(number, base=new_pull.base)

    def edit(
        self,
        owner: str,
        repo: str,
        number: int,
        base: Optional[str] = None,
        state: Optional[str] = None,
    ) -> PullRequest:
        self.parent.record('edit_pull', owner, repo, number, base, state)
        if number in self.parent.edit_failures:
            raise self.parent.edit_failures[number]
        pull = self.parent.pulls_by_number.get(number)
        if pull is None:
            raise NotFoundError(f'edit pull request #{number}')
        if base is not None:
            pull.base_ref = base
            pull.base_label = f'{self.parent.owner}:{base}'
        if state is not None:
            pull.state = state
        self.parent.edited_pulls.append((number, base, state))
        return PullRequest(**vars(pull))

    def merge(
        self, owner: str, repo: str, number: int, commit_message: str, merge_method: str
    ) -> MergeResult:
        self.parent.record('merge_pull', owner, repo, number, commit_message, merge_method)
        self.parent.merged_pulls.append((number, commit_message, merge_method))
        return self.parent.merge_result
