"""
Pages Routes - Public portfolio page
"""

from flask import render_template, request
from utils.feed import ContentFeed, SKELETON_CARDS
from . import pages_bp


@pages_bp.route('/')
def index():
    """Landing page: hero, about, portfolio grid and contact form"""
    feed = ContentFeed().load()
    selected_category = request.args.get('category') or None

    return render_template('index.html',
                           categories=feed.categories,
                           content=feed.filter(selected_category),
                           selected_category=selected_category,
                           skeleton_cards=SKELETON_CARDS)
