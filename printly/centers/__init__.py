"""
Centers — print center registration and approval.

    from printly.centers import CenterService

    centers = CenterService(MemoryCenterStore())
    center = (await centers.register("Copy Corner", "hi@copy.example")).unwrap()
    await centers.set_status(center.id, CenterStatus.APPROVED)
"""

from printly.centers._service import CenterService

__all__ = ("CenterService",)
