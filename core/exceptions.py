"""
Domain exceptions raised by service modules.
All of them are DRF APIExceptions, so config.exceptions.custom_exception_handler
renders them into the standard envelope.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound


class ResourceNotFound(NotFound):
    """Referenced entity id does not exist."""

    def __init__(self, resource='Resource'):
        super().__init__(f'{resource} not found')


class BusinessRuleViolation(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Operation not allowed'
    default_code = 'business_rule_violation'


class CapacityExceeded(BusinessRuleViolation):
    default_detail = 'Chit scheme is full'
    default_code = 'capacity_exceeded'


class AlreadyEnrolled(BusinessRuleViolation):
    default_detail = 'Customer is already enrolled in this chit scheme'
    default_code = 'already_enrolled'


class HasDependents(BusinessRuleViolation):
    default_detail = 'Record has dependent records'
    default_code = 'has_dependents'


class InvalidMember(BusinessRuleViolation):
    default_detail = 'Winning member does not belong to this chit scheme'
    default_code = 'invalid_member'


class ImmutableRecord(BusinessRuleViolation):
    default_detail = 'Record can no longer be modified'
    default_code = 'immutable_record'
