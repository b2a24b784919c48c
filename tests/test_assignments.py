"""
Assignment workflow: available <-> assigned bookkeeping, returns and write-offs.
"""

import pytest

from app.models import Assignment
from app.services import assignments as assignment_service
from app.services.exceptions import (
    Forbidden, InsufficientQuantity, InvalidStateTransition, ValidationError
)
from app.services.ledger import unit_of_work


def assign(session, actor, row, personnel, quantity):
    with unit_of_work(session):
        return assignment_service.create_assignment(
            session, actor,
            asset_id=row.id,
            personnel_id=personnel.id,
            quantity=quantity
        )


class TestCreateAssignment:

    def test_assigning_all_available_then_one_more_fails(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.rifle, 5)

        assign(session, seed.officer_alpha, row, seed.soldier_alpha, 5)

        row = refresh(row)
        assert (row.quantity, row.available_quantity, row.assigned_quantity) == (5, 0, 5)
        assert row.status == 'assigned'

        with pytest.raises(InsufficientQuantity):
            assign(session, seed.officer_alpha, row, seed.soldier_alpha, 1)

    def test_personnel_must_belong_to_the_row_base(self, session, seed, make_row):
        row = make_row(seed.alpha, seed.rifle, 5)

        with pytest.raises(ValidationError):
            assign(session, seed.admin, row, seed.soldier_bravo, 1)

    def test_other_base_row_is_forbidden(self, session, seed, make_row):
        row = make_row(seed.bravo, seed.rifle, 5)

        with pytest.raises(Forbidden):
            assign(session, seed.officer_alpha, row, seed.soldier_bravo, 1)


class TestReturnAssignment:

    def test_partial_then_full_return(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.rifle, 10)
        assignment = assign(session, seed.admin, row, seed.soldier_alpha, 4)

        with unit_of_work(session):
            assignment_service.return_assignment(session, seed.officer_alpha, assignment.id, return_quantity=1)

        assignment = session.get(Assignment, assignment.id)
        assert assignment.status == 'partially_returned'
        assert assignment.returned_quantity == 1
        assert assignment.return_date is None
        assert refresh(row).available_quantity == 7

        with unit_of_work(session):
            assignment_service.return_assignment(session, seed.officer_alpha, assignment.id)

        assignment = session.get(Assignment, assignment.id)
        assert assignment.status == 'returned'
        assert assignment.returned_quantity == 4
        assert assignment.return_date is not None
        row = refresh(row)
        assert (row.quantity, row.available_quantity, row.assigned_quantity) == (10, 10, 0)

    def test_return_above_outstanding_is_rejected(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.rifle, 10)
        assignment = assign(session, seed.admin, row, seed.soldier_alpha, 3)

        with pytest.raises(ValidationError):
            with unit_of_work(session):
                assignment_service.return_assignment(session, seed.admin, assignment.id, return_quantity=4)

        assert refresh(row).assigned_quantity == 3

    def test_returned_assignment_cannot_be_returned_again(self, session, seed, make_row):
        row = make_row(seed.alpha, seed.rifle, 10)
        assignment = assign(session, seed.admin, row, seed.soldier_alpha, 3)
        with unit_of_work(session):
            assignment_service.return_assignment(session, seed.admin, assignment.id)

        with pytest.raises(InvalidStateTransition):
            assignment_service.return_assignment(session, seed.admin, assignment.id)


class TestWriteOffAndDelete:

    def test_write_off_removes_outstanding_from_total(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.rifle, 10)
        assignment = assign(session, seed.admin, row, seed.soldier_alpha, 4)
        with unit_of_work(session):
            assignment_service.return_assignment(session, seed.admin, assignment.id, return_quantity=1)

        with unit_of_work(session):
            assignment_service.write_off_assignment(session, seed.commander_alpha, assignment.id, 'lost')

        assignment = session.get(Assignment, assignment.id)
        assert assignment.status == 'lost'
        assert assignment.written_off_quantity == 3
        row = refresh(row)
        assert (row.quantity, row.available_quantity, row.assigned_quantity) == (7, 7, 0)

    def test_officer_cannot_write_off(self, session, seed, make_row):
        row = make_row(seed.alpha, seed.rifle, 10)
        assignment = assign(session, seed.admin, row, seed.soldier_alpha, 1)

        with pytest.raises(Forbidden):
            assignment_service.write_off_assignment(session, seed.officer_alpha, assignment.id, 'damaged')

    def test_deleting_open_assignment_restores_available(self, session, seed, make_row, refresh):
        row = make_row(seed.alpha, seed.rifle, 10)
        assignment = assign(session, seed.admin, row, seed.soldier_alpha, 6)

        with unit_of_work(session):
            assignment_service.delete_assignment(session, seed.commander_alpha, assignment.id)

        row = refresh(row)
        assert (row.available_quantity, row.assigned_quantity) == (10, 0)
        assert session.query(Assignment).count() == 0


class TestAssignmentApi:

    def test_assign_and_return_through_api(self, client, seed, make_row, login_as, refresh):
        row = make_row(seed.alpha, seed.rifle, 5)
        login_as('officer_alpha')

        response = client.post('/api/assignments/', json={
            'asset_id': row.id,
            'personnel_id': seed.soldier_alpha.id,
            'quantity': 2
        })
        assert response.status_code == 201
        body = response.get_json()['data']
        assert body['outstanding_quantity'] == 2

        response = client.put(f"/api/assignments/{body['id']}/return", json={'return_quantity': 2})
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'returned'
        assert refresh(row).available_quantity == 5

    def test_default_quantity_is_one(self, client, seed, make_row, login_as, refresh):
        row = make_row(seed.alpha, seed.rifle, 5)
        login_as('commander_alpha')

        response = client.post('/api/assignments/', json={
            'asset_id': row.id,
            'personnel_id': seed.soldier_alpha.id
        })

        assert response.status_code == 201
        assert response.get_json()['data']['quantity'] == 1
        assert refresh(row).assigned_quantity == 1

    def test_write_off_requires_lost_or_damaged(self, client, session, seed, make_row, login_as):
        row = make_row(seed.alpha, seed.rifle, 5)
        assignment = assign(session, seed.admin, row, seed.soldier_alpha, 1)
        login_as('admin')

        response = client.put(f'/api/assignments/{assignment.id}/write-off', json={'status': 'returned'})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'validation_error'
