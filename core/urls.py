"""
URL configuration for core app (mounted under /api/).
"""

from django.urls import path

from . import views

urlpatterns = [
    # Auth
    path('auth/login', views.LoginView.as_view(), name='auth_login'),
    path('auth/me', views.MeView.as_view(), name='auth_me'),
    path('auth/logout', views.LogoutView.as_view(), name='auth_logout'),
    path('auth/directory', views.DirectoryView.as_view(), name='auth_directory'),

    # Stables
    path('stables', views.StableListView.as_view(), name='stable_list'),
    path('stables/<int:pk>', views.StableDetailView.as_view(), name='stable_detail'),

    # Vets
    path('vets', views.VetListView.as_view(), name='vet_list'),
    path('vets/<int:pk>', views.VetDetailView.as_view(), name='vet_detail'),

    # Owners
    path('owners', views.OwnerListView.as_view(), name='owner_list'),
    path('owners/<int:pk>', views.OwnerDetailView.as_view(), name='owner_detail'),

    # Horses
    path('horses', views.HorseListView.as_view(), name='horse_list'),
    path('horses/<int:pk>', views.HorseDetailView.as_view(), name='horse_detail'),
]
