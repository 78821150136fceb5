from locust import HttpUser, task, between
import random

CATEGORIES = ["electronics", "clothing", "books", "food", "other"]
SORTS = ["price_asc", "price_desc", "newest", "oldest"]


class ApiUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Register a user for this simulated client
        n = random.randint(1, 1_000_000)
        r = self.client.post("/api/auth/register", json={
            "username": f"user_{n}",
            "email": f"user_{n}@example.com",
            "password": "Loadtest1!",
        })
        if r.status_code == 201:
            self.headers = {"Authorization": f"Bearer {r.json()['token']}"}
        else:
            self.headers = None

    @task(5)
    def list_products(self):
        params = {"sort": random.choice(SORTS), "page": random.randint(1, 3), "limit": 5}
        if random.random() < 0.5:
            params["category"] = random.choice(CATEGORIES)
        self.client.get("/api/products", params=params, name="/api/products")

    @task(2)
    def create_product(self):
        if not self.headers:
            return
        self.client.post("/api/products", headers=self.headers, json={
            "name": f"Item {random.randint(1, 10_000)}",
            "description": "Load test product",
            "price": round(random.random() * 100, 2),
            "category": random.choice(CATEGORIES),
            "quantity": random.randint(0, 20),
        })

    @task(1)
    def my_products(self):
        if not self.headers:
            return
        self.client.get("/api/products/user/my-products", headers=self.headers)
