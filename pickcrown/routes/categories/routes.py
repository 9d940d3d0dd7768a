import logging

from flask import jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import db
from pickcrown.models import Category, CategoryOption, CategoryPick, Event
from pickcrown.routes.categories import bp
from pickcrown.services.imports import import_categories
from pickcrown.utils.api_helpers import error_response, get_json_body, parse_int
from pickcrown.utils.cache_utils import invalidate_results_cache

logger = logging.getLogger(__name__)


@bp.route("/categories")
def list_categories():
    event_id = parse_int(request.args.get("eventId"))
    if event_id is None:
        return error_response("eventId is required", 400)

    categories = (
        Category.query.filter_by(event_id=event_id)
        .order_by(Category.order_index, Category.id)
        .all()
    )
    return jsonify(
        {"categories": [category.to_dict(include_options=True) for category in categories]}
    )


@bp.route("/categories", methods=["POST"])
def create_category():
    """Add a category at the end of the event, optionally with options"""
    data = get_json_body()
    event_id = parse_int(data.get("eventId"))
    name = (data.get("name") or "").strip()
    if event_id is None or not name:
        return error_response("eventId and name are required", 400)

    if not db.session.get(Event, event_id):
        return error_response("Event not found", 404)

    points = 1
    if data.get("points") is not None:
        points = parse_int(data.get("points"))
        if points is None or points < 0:
            return error_response("points must be a non-negative integer", 400)

    options = data.get("options") or []
    if not isinstance(options, list):
        return error_response("options must be a list", 400)

    try:
        category = Category(
            event_id=event_id,
            name=name,
            type=data.get("type") or "single_select",
            order_index=Category.next_order_index(event_id),
            points=points,
            phase_id=parse_int(data.get("phaseId")),
        )
        db.session.add(category)
        db.session.flush()

        option_names = [str(option).strip() for option in options if str(option).strip()]
        for idx, option_name in enumerate(option_names, start=1):
            db.session.add(
                CategoryOption(category_id=category.id, name=option_name, order_index=idx)
            )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating category: {e}")
        return error_response("Failed to create category", 500)

    return jsonify({"success": True, "category": category.to_dict(include_options=True)}), 201


@bp.route("/categories", methods=["DELETE"])
def delete_category():
    category_id = parse_int(request.args.get("id"))
    if category_id is None:
        return error_response("Category id is required", 400)

    category = db.session.get(Category, category_id)
    if not category:
        return error_response("Category not found", 404)

    try:
        picks_deleted = CategoryPick.query.filter_by(category_id=category_id).delete(
            synchronize_session=False
        )
        category.delete_with_options()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting category {category_id}: {e}")
        return error_response("Failed to delete category", 500)

    logger.info(f"Deleted category {category_id} and {picks_deleted} picks")
    invalidate_results_cache(f"category {category_id} deleted")
    return jsonify({"success": True})


@bp.route("/categories/import", methods=["POST"])
def import_event_categories():
    """Append many categories at once; each one succeeds or fails alone"""
    data = get_json_body()
    event_id = parse_int(data.get("eventId"))
    if event_id is None:
        return error_response("eventId is required", 400)

    categories = data.get("categories")
    if not isinstance(categories, list) or not categories:
        return error_response("categories must be a non-empty list", 400)

    if not db.session.get(Event, event_id):
        return error_response("Event not found", 404)

    try:
        result = import_categories(event_id, categories)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error importing categories into event {event_id}: {e}")
        return error_response("Failed to import categories", 500)

    return jsonify(
        {
            "success": result["skipped"] == 0,
            "categoriesCreated": result["categories_created"],
            "optionsCreated": result["options_created"],
            "skipped": result["skipped"],
        }
    )


# Category options


@bp.route("/category-options", methods=["POST"])
def create_option():
    data = get_json_body()
    category_id = parse_int(data.get("categoryId"))
    name = (data.get("name") or "").strip()
    if category_id is None or not name:
        return error_response("categoryId and name are required", 400)

    category = db.session.get(Category, category_id)
    if not category:
        return error_response("Category not found", 404)

    order_index = parse_int(data.get("order_index"))
    if order_index is None:
        current_max = (
            db.session.query(db.func.max(CategoryOption.order_index))
            .filter(CategoryOption.category_id == category_id)
            .scalar()
        )
        order_index = (current_max or 0) + 1

    option = CategoryOption(category_id=category_id, name=name, order_index=order_index)

    try:
        db.session.add(option)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error creating option for category {category_id}: {e}")
        return error_response("Failed to create option", 500)

    return jsonify({"success": True, "option": option.to_dict()}), 201


@bp.route("/category-options", methods=["PUT"])
def update_option():
    data = get_json_body()
    option_id = parse_int(data.get("id"))
    if option_id is None:
        return error_response("Option id is required", 400)

    option = db.session.get(CategoryOption, option_id)
    if not option:
        return error_response("Option not found", 404)

    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            return error_response("Option name is required", 400)
        option.name = name

    if "order_index" in data:
        order_index = parse_int(data.get("order_index"))
        if order_index is None:
            return error_response("order_index must be an integer", 400)
        option.order_index = order_index

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating option {option_id}: {e}")
        return error_response("Failed to update option", 500)

    return jsonify({"success": True, "option": option.to_dict()})


@bp.route("/category-options", methods=["DELETE"])
def delete_option():
    option_id = parse_int(request.args.get("id"))
    if option_id is None:
        return error_response("Option id is required", 400)

    option = db.session.get(CategoryOption, option_id)
    if not option:
        return error_response("Option not found", 404)

    if CategoryPick.query.filter_by(option_id=option_id).first():
        return error_response("Option has already been picked", 409)

    try:
        category = option.category
        if category and category.correct_option_id == option_id:
            category.correct_option_id = None
        db.session.delete(option)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting option {option_id}: {e}")
        return error_response("Failed to delete option", 500)

    return jsonify({"success": True})
