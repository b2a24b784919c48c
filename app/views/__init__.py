"""JSON API blueprints, one module per resource"""
