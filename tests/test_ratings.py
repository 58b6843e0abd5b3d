"""
Rating endpoint tests for Washline
"""
import json

import pytest

import washline.routes.ratings as ratings_routes
from washline import db
from washline.models import Rating


class TestSubmitRating:
    """Test rating upsert"""

    def test_create_rating(self, client, auth_headers, test_order):
        response = client.post('/api/ratings',
            headers=auth_headers,
            json={'order_id': test_order.id, 'stars': 5, 'feedback': 'Spotless'}
        )

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['message'] == 'Rating submitted'
        assert data['rating']['stars'] == 5
        assert data['rating']['feedback'] == 'Spotless'

    def test_resubmit_updates_single_record(self, client, auth_headers, test_order):
        client.post('/api/ratings', headers=auth_headers, json={'order_id': test_order.id, 'stars': 2})

        response = client.post('/api/ratings',
            headers=auth_headers,
            json={'order_id': test_order.id, 'stars': 4, 'feedback': 'Better on reflection'}
        )

        assert response.status_code == 200
        assert json.loads(response.data)['message'] == 'Rating updated'
        ratings = Rating.query.filter_by(order_id=test_order.id).all()
        assert len(ratings) == 1
        assert ratings[0].stars == 4

    def test_stars_as_numeric_string(self, client, auth_headers, test_order):
        response = client.post('/api/ratings',
            headers=auth_headers,
            json={'order_id': test_order.id, 'stars': '3'}
        )
        assert json.loads(response.data)['rating']['stars'] == 3

    @pytest.mark.parametrize('stars', [0, 6, 4.5, 'five', True])
    def test_invalid_stars(self, client, auth_headers, test_order, stars):
        response = client.post('/api/ratings',
            headers=auth_headers,
            json={'order_id': test_order.id, 'stars': stars}
        )

        assert response.status_code == 400
        assert Rating.query.count() == 0

    def test_missing_fields(self, client, auth_headers):
        response = client.post('/api/ratings', headers=auth_headers, json={'stars': 5})
        assert response.status_code == 400

    def test_foreign_order_is_404(self, client, other_headers, test_order):
        response = client.post('/api/ratings',
            headers=other_headers,
            json={'order_id': test_order.id, 'stars': 1}
        )

        assert response.status_code == 404
        assert Rating.query.count() == 0


class TestReadRatings:
    """Test rating queries for an order"""

    def test_average(self, client, auth_headers, test_order):
        client.post('/api/ratings', headers=auth_headers, json={'order_id': test_order.id, 'stars': 4})

        response = client.get(f'/api/ratings/order/{test_order.id}/average', headers=auth_headers)

        assert response.status_code == 200
        assert json.loads(response.data) == {'average': 4.0, 'count': 1}

    def test_average_without_ratings(self, client, auth_headers, test_order):
        response = client.get(f'/api/ratings/order/{test_order.id}/average', headers=auth_headers)
        assert json.loads(response.data) == {'average': 0, 'count': 0}

    def test_list_for_order(self, client, auth_headers, test_order):
        client.post('/api/ratings', headers=auth_headers, json={'order_id': test_order.id, 'stars': 5})

        response = client.get(f'/api/ratings/order/{test_order.id}', headers=auth_headers)

        ratings = json.loads(response.data)['ratings']
        assert len(ratings) == 1
        assert ratings[0]['order_id'] == test_order.id

    def test_my_rating(self, client, auth_headers, test_order):
        response = client.get(f'/api/ratings/order/{test_order.id}/me', headers=auth_headers)
        assert json.loads(response.data)['rating'] is None

        client.post('/api/ratings', headers=auth_headers, json={'order_id': test_order.id, 'stars': 3})

        response = client.get(f'/api/ratings/order/{test_order.id}/me', headers=auth_headers)
        assert json.loads(response.data)['rating']['stars'] == 3

    def test_foreign_order_queries_are_404(self, client, other_headers, test_order):
        for path in ('', '/average', '/me'):
            response = client.get(f'/api/ratings/order/{test_order.id}{path}', headers=other_headers)
            assert response.status_code == 404


class TestUpsertRating:
    """Test the unique-constraint fallback in upsert_rating"""

    def test_concurrent_insert_becomes_update(self, app, monkeypatch, test_customer, test_order):
        user_id, order_id = test_customer.id, test_order.id
        db.session.add(Rating(user_id=user_id, order_id=order_id, stars=2, feedback='first'))
        db.session.commit()
        # Simulate another request inserting between our lookup and our insert
        monkeypatch.setattr(ratings_routes, '_find_rating', lambda user_id, order_id: None)

        rating, created = ratings_routes.upsert_rating(user_id, order_id, 5, 'second')

        assert created is False
        assert rating.stars == 5
        ratings = Rating.query.filter_by(user_id=user_id, order_id=order_id).all()
        assert len(ratings) == 1
        assert ratings[0].feedback == 'second'

    def test_first_insert_is_created(self, app, test_customer, test_order):
        rating, created = ratings_routes.upsert_rating(test_customer.id, test_order.id, 4, '')

        assert created is True
        assert Rating.query.count() == 1
