# dues/selectors.py
"""Read-side queries for dues assignments."""

from dues.models import DuesAssignment


def list_assignments(*, year: int = None, person_type: str = None, dues_type: str = None, paid: bool = None):
    """
    Assignments ordered by type, person_type, person_id.

    Out-of-enum person_type / type filters are ignored.
    """
    qs = DuesAssignment.objects.all()
    if year:
        qs = qs.filter(year=year)
    if person_type in DuesAssignment.PersonType.values:
        qs = qs.filter(person_type=person_type)
    if dues_type in DuesAssignment.Type.values:
        qs = qs.filter(type=dues_type)
    if paid is not None:
        qs = qs.filter(paid=paid)
    return qs.order_by("type", "person_type", "person_id")
