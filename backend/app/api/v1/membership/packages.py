"""
Package endpoints (membership plan reference data).
"""
from typing import Optional
from math import ceil
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.db.base import get_db
from app.models.chapter import Chapter
from app.models.package import Package
from app.schemas.package import (
    PackageCreate, PackageUpdate, PackageResponse, PackageListResponse
)

router = APIRouter()


def package_to_response(package: Package) -> PackageResponse:
    """Convert Package model to PackageResponse schema."""
    return PackageResponse(
        id=package.id,
        name=package.name,
        period_months=package.period_months,
        is_venue_fee=package.is_venue_fee,
        chapter_id=package.chapter_id,
        basic_fees=package.basic_fees,
        gst_rate=package.gst_rate,
        active=package.active,
        created=package.created,
        updated=package.updated,
    )


async def check_chapter_exists(db: AsyncSession, chapter_id: str) -> None:
    if await db.get(Chapter, chapter_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Chapter not found"
        )


@router.get("", response_model=PackageListResponse)
async def list_packages(
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    is_venue_fee: Optional[bool] = None,
    chapter_id: Optional[str] = None,
    active: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
):
    """List packages."""
    query = select(Package)

    if is_venue_fee is not None:
        query = query.where(Package.is_venue_fee == is_venue_fee)
    if chapter_id:
        query = query.where(Package.chapter_id == chapter_id)
    if active is not None:
        query = query.where(Package.active == active)

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total_items = total_result.scalar() or 0

    query = query.order_by(Package.name.asc())
    query = query.offset((page - 1) * perPage).limit(perPage)

    result = await db.execute(query)
    packages = result.scalars().all()

    return PackageListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[package_to_response(p) for p in packages]
    )


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    package_data: PackageCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a package. Venue fee packages must name their chapter."""
    if package_data.chapter_id:
        await check_chapter_exists(db, package_data.chapter_id)

    package = Package(**package_data.model_dump())
    db.add(package)
    await db.flush()
    return package_to_response(package)


@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a package by ID."""
    package = await db.get(Package, package_id)
    if package is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Package not found"
        )
    return package_to_response(package)


@router.patch("/{package_id}", response_model=PackageResponse)
async def update_package(
    package_id: str,
    package_data: PackageUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a package."""
    package = await db.get(Package, package_id)
    if package is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Package not found"
        )

    update_data = package_data.model_dump(exclude_unset=True)
    is_venue_fee = update_data.get("is_venue_fee", package.is_venue_fee)
    chapter_id = update_data.get("chapter_id", package.chapter_id)
    if is_venue_fee and not chapter_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Chapter ID is required for venue fee packages"
        )
    if update_data.get("chapter_id"):
        await check_chapter_exists(db, update_data["chapter_id"])

    for field, value in update_data.items():
        setattr(package, field, value)

    await db.flush()
    return package_to_response(package)
