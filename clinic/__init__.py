"""Campus clinic application.

Models, serializers, services and views for student health logging,
appointments, chat and hostel outbreak surveillance.
"""
