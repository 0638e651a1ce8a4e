"""Main window and its mixins for Profile Frame Studio"""
