# Products
from pricebook.models.products.product_models import Product, PriceHistory

# Users and auth
from pricebook.models.users.user_models import Profile, UserRole, UserPermission
