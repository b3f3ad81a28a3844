from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Registration & authentication
    path('register/', views.register, name='register'),
    path('activate/', views.activate_account, name='activate'),
    path('authenticate/', views.login, name='login'),

    # Current account
    path('account/', views.account, name='account'),
    path('account/change-password/', views.change_password, name='change-password'),

    # Password reset
    path('account/reset-password/init/', views.reset_password_init, name='reset-password-init'),
    path('account/reset-password/finish/', views.reset_password_finish, name='reset-password-finish'),

    # User administration
    path('users/', views.users, name='users'),
    path('users/authorities/', views.authorities, name='authorities'),
    path('users/<str:login>/', views.user_detail, name='user-detail'),
]
