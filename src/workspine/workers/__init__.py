"""
Workers: units of business logic with a declarative input contract.

Usage:
    from workspine.workers import BasicWorker, after_initialize

    class UpdateUser(BasicWorker):
        required_attributes = ("user", "params")

        def execute(self):
            self.user.update(self.params)
            return self.user

    worker = UpdateUser.call_self(user=user, params={"email": "a@b.c"})
    worker.success, worker.errors
"""

from workspine.workers.base import BasicWorker, after_initialize
from workspine.workers.contract import AttributeContract, contract_for
from workspine.workers.params import permit_attributes

__all__ = [
    "BasicWorker",
    "after_initialize",
    "AttributeContract",
    "contract_for",
    "permit_attributes",
]
