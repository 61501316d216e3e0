from __future__ import annotations
from genro_navroutes import MemoryNavigation, Router

SESSION = {"role": None}

def require_role(role):
    # Middleware factory: halts the chain unless the session has the role
    def check(request, chain, next):
        if SESSION["role"] != role:
            print(f"  denied: {chain.value} needs '{role}'")
            chain.prevent_default()
            return
        next()
    return check

def show_info(request, chain, next):
    print("  public info")

def show_profile(request, chain, next):
    print(f"  profile of user {request.params['id']}")

def show_settings(request, chain, next):
    print(f"  admin settings, section {request.params['section'] or 'general'}")

if __name__ == "__main__":
    nav = MemoryNavigation("/")
    router = Router(nav, hashbang=True)
    router.add("/info", show_info)
    router.add("/user/:id", require_role("user"), show_profile)
    admin = router.context("/admin", require_role("admin"))
    admin("settings/:section?", show_settings)

    print("--- 1. Public Access ---")
    router.navigate("/info")

    print("\n--- 2. User profile WITHOUT role ---")
    router.navigate("/user/7")
    print(f"  run_default={router.state.run_default}")

    print("\n--- 3. User profile WITH 'user' role ---")
    SESSION["role"] = "user"
    router.navigate("/user/8")

    print("\n--- 4. Admin settings WITH 'user' role ---")
    router.navigate("/admin/settings")

    print("\n--- 5. Admin settings WITH 'admin' role ---")
    SESSION["role"] = "admin"
    router.navigate("/admin/settings/mail")

    print("\n--- 6. Back through history ---")
    nav.back()
    print(f"  url is now {nav.url}")
