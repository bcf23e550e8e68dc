"""Tenant storefront: shop info and the live meal catalogue"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, get_current_tenant, get_storefront_context
from api.responses import TENANT_ERROR_RESPONSES
from app.exceptions import NotFoundError
from domain.mappers import MealMapper
from domain.models import Tenant
from domain.schemas.catalog_schemas import MealResponse
from domain.schemas.tenant_schemas import StorefrontInfo
from repositories.meal_repository import MealRepository
from services.cart_service import CartService
from services.context import StorefrontContext

router = APIRouter(tags=["Storefront"], responses=TENANT_ERROR_RESPONSES)
logger = logging.getLogger("dancymeals.api.storefront")


@router.get("/store", response_model=StorefrontInfo)
def store_info(tenant: Tenant = Depends(get_current_tenant)):
    return tenant


@router.get("/meals", response_model=List[MealResponse])
def list_meals(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    """Live meals of the current tenant with components and what is already in the cart"""
    meals = MealRepository(db).list_live(ctx.tenant_id)
    return [
        MealMapper.to_response(meal, CartService.components_for_meal(ctx, meal.id))
        for meal in meals
    ]


@router.get("/meals/{meal_id}", response_model=MealResponse)
def get_meal(
    meal_id: int,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    meal = MealRepository(db).get_by_id(meal_id)
    if meal is None or meal.tenant_id != ctx.tenant_id or not meal.is_orderable:
        raise NotFoundError(f"Meal {meal_id} not found")
    return MealMapper.to_response(meal, CartService.components_for_meal(ctx, meal.id))
