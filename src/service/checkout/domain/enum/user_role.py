from enum import StrEnum


class UserRole(StrEnum):
    BUYER = 'buyer'
    SELLER = 'seller'
    ADMIN = 'admin'
