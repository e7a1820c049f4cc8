"""Demo catalog and loans for a fresh in-memory library."""

DEMO_BOOKS = [
    {
        "id": "1",
        "title": "Laskar Pelangi",
        "author": "Andrea Hirata",
        "publisher": "Bentang Pustaka",
        "year": 2005,
        "category": "Novel",
        "description": "An inspiring novel about the children of Belitung fighting for an education.",
        "cover_url": "https://images-na.ssl-images-amazon.com/images/S/compressed.photo.goodreads.com/books/1410632027i/1362193.jpg",
        "isbn": "9789793062792",
        "stock": 3,
    },
    {
        "id": "2",
        "title": "Bumi Manusia",
        "author": "Pramoedya Ananta Toer",
        "publisher": "Hasta Mitra",
        "year": 1980,
        "category": "Novel",
        "description": "The first novel of the Buru Quartet, following Minke in the colonial era.",
        "cover_url": "https://images-na.ssl-images-amazon.com/images/S/compressed.photo.goodreads.com/books/1565392935i/1398034.jpg",
        "isbn": "9789799731234",
        "stock": 2,
    },
    {
        "id": "3",
        "title": "Filosofi Teras",
        "author": "Henry Manampiring",
        "publisher": "Kompas",
        "year": 2018,
        "category": "Non-Fiction",
        "description": "Stoic philosophy and how to apply it to modern life.",
        "cover_url": "https://images-na.ssl-images-amazon.com/images/S/compressed.photo.goodreads.com/books/1549204790i/42861019.jpg",
        "isbn": "9786024125875",
        "stock": 0,
    },
    {
        "id": "4",
        "title": "Atomic Habits",
        "author": "James Clear",
        "publisher": "Gramedia",
        "year": 2019,
        "category": "Non-Fiction",
        "description": "An easy and proven way to build good habits and break bad ones.",
        "cover_url": "https://images-na.ssl-images-amazon.com/images/S/compressed.photo.goodreads.com/books/1655988385i/40121378.jpg",
        "isbn": "9786020633176",
        "stock": 5,
    },
    {
        "id": "5",
        "title": "Sapiens: Riwayat Singkat Umat Manusia",
        "author": "Yuval Noah Harari",
        "publisher": "Kepustakaan Populer Gramedia",
        "year": 2017,
        "category": "History",
        "description": "A history of humankind from the stone age to the modern era.",
        "cover_url": "https://images-na.ssl-images-amazon.com/images/S/compressed.photo.goodreads.com/books/1595674533i/23692271.jpg",
        "isbn": "9786024240240",
        "stock": 1,
    },
    {
        "id": "6",
        "title": "Sejarah Dunia yang Disembunyikan",
        "author": "Jonathan Black",
        "publisher": "Alvabet",
        "year": 2015,
        "category": "History",
        "description": "The hidden history of ancient civilisations.",
        "cover_url": "https://images-na.ssl-images-amazon.com/images/S/compressed.photo.goodreads.com/books/1347493874i/5722.jpg",
        "isbn": "9786021193143",
        "stock": 0,
    },
]

# Stock figures above already account for the two active loans
DEMO_LOANS = [
    {
        "id": "1",
        "book_id": "3",
        "student_name": "Ahmad Rizky",
        "student_class": "XII IPA 1",
        "student_nis": "12345",
        "borrow_date": "2024-01-15",
        "return_date": None,
        "status": "active",
    },
    {
        "id": "2",
        "book_id": "6",
        "student_name": "Siti Nurhaliza",
        "student_class": "XI IPS 2",
        "student_nis": "12346",
        "borrow_date": "2024-01-10",
        "return_date": None,
        "status": "active",
    },
    {
        "id": "3",
        "book_id": "1",
        "student_name": "Budi Santoso",
        "student_class": "X MIPA 3",
        "student_nis": "12347",
        "borrow_date": "2024-01-05",
        "return_date": "2024-01-12",
        "status": "returned",
    },
]
