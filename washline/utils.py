from flask import request, current_app

from washline.errors import NotFound, ValidationError


def json_body():
    """Request JSON as a dict; a missing or non-object body is a 400"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def require_fields(data, fields):
    missing = [f for f in fields if data.get(f) in (None, '', [])]
    if missing:
        raise ValidationError(
            'Missing required fields: {}'.format(', '.join(missing)),
            required=list(fields),
        )


def get_owned_or_404(model, record_id, user_id, label):
    """Fetch a record owned by ``user_id``; foreign ids look exactly like absent ones"""
    record = model.query.filter_by(id=record_id, user_id=user_id).first()
    if not record:
        raise NotFound('{} not found'.format(label))
    return record


def paginate_query(query):
    """Helper to paginate SQLAlchemy queries from ?page=&per_page="""
    page = max(1, request.args.get('page', 1, type=int))
    per_page = request.args.get('per_page', current_app.config['ITEMS_PER_PAGE'], type=int)
    per_page = min(current_app.config['MAX_ITEMS_PER_PAGE'], max(1, per_page))

    paginated = query.paginate(page=page, per_page=per_page, error_out=False)

    return {
        'items': paginated.items,
        'total': paginated.total,
        'page': page,
        'per_page': per_page,
        'pages': paginated.pages,
        'has_next': paginated.has_next,
        'has_prev': paginated.has_prev
    }
