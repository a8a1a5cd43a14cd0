"""Seed content of the offline demo store."""

DEMO_PROFILE = {
    "_id": "demo-user-1",
    "id": "demo-user-1",
    "username": "Demo User",
    "email": "demo@test.com",
    "isAdmin": False,
    "bio": "Movie enthusiast and avid reviewer",
    "profilePicture": "",
    "favoriteGenres": ["Action", "Drama", "Sci-Fi"],
    "createdAt": "2023-01-01T00:00:00",
    "updatedAt": "2023-01-01T00:00:00",
}

# Accounts the demo store accepts at login while offline
DEMO_ACCOUNTS = {
    "admin@test.com": {"username": "Admin User", "isAdmin": True},
    "user@test.com": {"username": "Demo User", "isAdmin": False},
}

SAMPLE_MOVIES = [
    {
        "_id": "1",
        "title": "The Shawshank Redemption",
        "genre": ["Drama"],
        "releaseYear": 1994,
        "director": "Frank Darabont",
        "cast": ["Tim Robbins", "Morgan Freeman"],
        "synopsis": "Two imprisoned men bond over a number of years, finding solace and eventual "
                    "redemption through acts of common decency.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/q6y0Go1tsGEsmtFryDOJo3dEmqu.jpg",
        "duration": 142,
    },
    {
        "_id": "2",
        "title": "The Godfather",
        "genre": ["Crime", "Drama"],
        "releaseYear": 1972,
        "director": "Francis Ford Coppola",
        "cast": ["Marlon Brando", "Al Pacino", "James Caan"],
        "synopsis": "The aging patriarch of an organized crime dynasty transfers control of his "
                    "clandestine empire to his reluctant son.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/3bhkrj58Vtu7enYsRolD1fZdja1.jpg",
        "duration": 175,
    },
    {
        "_id": "3",
        "title": "The Dark Knight",
        "genre": ["Action", "Crime", "Drama"],
        "releaseYear": 2008,
        "director": "Christopher Nolan",
        "cast": ["Christian Bale", "Heath Ledger", "Aaron Eckhart"],
        "synopsis": "When the menace known as the Joker wreaks havoc and chaos on the people of "
                    "Gotham, Batman must accept one of the greatest psychological and physical tests.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/qJ2tW6WMUDux911r6m7haRef0WH.jpg",
        "duration": 152,
    },
    {
        "_id": "4",
        "title": "Pulp Fiction",
        "genre": ["Crime", "Drama"],
        "releaseYear": 1994,
        "director": "Quentin Tarantino",
        "cast": ["John Travolta", "Uma Thurman", "Samuel L. Jackson"],
        "synopsis": "The lives of two mob hitmen, a boxer, a gangster and his wife intertwine in "
                    "four tales of violence and redemption.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/d5iIlFn5s0ImszYzBPb8JPIfbXD.jpg",
        "duration": 154,
    },
    {
        "_id": "5",
        "title": "Forrest Gump",
        "genre": ["Drama", "Romance"],
        "releaseYear": 1994,
        "director": "Robert Zemeckis",
        "cast": ["Tom Hanks", "Robin Wright", "Gary Sinise"],
        "synopsis": "The presidencies of Kennedy and Johnson, Vietnam, Watergate, and other history "
                    "unfold through the perspective of an Alabama man.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/arw2vcBveWOVZr6pxd9XTd1TdQa.jpg",
        "duration": 142,
    },
    {
        "_id": "6",
        "title": "Inception",
        "genre": ["Action", "Sci-Fi", "Thriller"],
        "releaseYear": 2010,
        "director": "Christopher Nolan",
        "cast": ["Leonardo DiCaprio", "Marion Cotillard", "Tom Hardy"],
        "synopsis": "A thief who steals corporate secrets through dream-sharing technology is given "
                    "the inverse task of planting an idea.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/9gk7adHYeDvHkCSEqAvQNLV5Uge.jpg",
        "duration": 148,
    },
    {
        "_id": "7",
        "title": "The Matrix",
        "genre": ["Action", "Sci-Fi"],
        "releaseYear": 1999,
        "director": "The Wachowskis",
        "cast": ["Keanu Reeves", "Laurence Fishburne", "Carrie-Anne Moss"],
        "synopsis": "A computer hacker learns from mysterious rebels about the true nature of his "
                    "reality and his role in the war against its controllers.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg",
        "duration": 136,
    },
    {
        "_id": "8",
        "title": "Goodfellas",
        "genre": ["Biography", "Crime", "Drama"],
        "releaseYear": 1990,
        "director": "Martin Scorsese",
        "cast": ["Robert De Niro", "Ray Liotta", "Joe Pesci"],
        "synopsis": "The story of Henry Hill and his life in the mob, covering his relationship "
                    "with his wife Karen Hill and his mob partners.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/aKuFiU82s5ISJpGZp7YkIr3kCUd.jpg",
        "duration": 146,
    },
    {
        "_id": "9",
        "title": "Schindler's List",
        "genre": ["Biography", "Drama", "History"],
        "releaseYear": 1993,
        "director": "Steven Spielberg",
        "cast": ["Liam Neeson", "Ralph Fiennes", "Ben Kingsley"],
        "synopsis": "In German-occupied Poland during World War II, industrialist Oskar Schindler "
                    "gradually becomes concerned for his Jewish workforce.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/sF1U4EUQS8YHUYjNl3pMGNIQyr0.jpg",
        "duration": 195,
    },
    {
        "_id": "10",
        "title": "Fight Club",
        "genre": ["Drama"],
        "releaseYear": 1999,
        "director": "David Fincher",
        "cast": ["Brad Pitt", "Edward Norton", "Helena Bonham Carter"],
        "synopsis": "An insomniac office worker and a devil-may-care soapmaker form an underground "
                    "fight club.",
        "posterUrl": "https://image.tmdb.org/t/p/w500/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
        "duration": 139,
    },
]
